"""Code for gathering multipolygons from every input source"""

import itertools
import pathlib
from typing import IO, Iterable, Iterator, List, Optional, Sequence

from polyclip.utils.log import getLogger

from ..utils import bbox
from . import parse, split
from .common import MultiPolygon, count_points
from .sources import InputSource, SourceKind, StrPath, resolve_sources

logger = getLogger(__file__)


def read_source(source: InputSource, warn: parse.Warn) -> Iterator[MultiPolygon]:
    """Lazily parse every GeoJSON object in a source into a multipolygon"""
    logger.debug("Reading GeoJSON from %s", source.name)

    with source.open() as stream:
        fragments = split.split_stream(stream)
        for obj in parse.decode_fragments(fragments, source.name):
            yield parse.parse(obj, warn)


def _read_files(
    paths: Iterable[pathlib.Path], warn: parse.Warn
) -> Iterator[MultiPolygon]:
    for path in paths:
        yield from read_source(InputSource(SourceKind.FILE, path=path), warn)


def iter_inputs(
    sources: Sequence[InputSource],
    warn: Optional[parse.Warn] = None,
    bboxes: bool = False,
) -> Iterator[MultiPolygon]:
    """Yield multipolygons from sources in order, subject and stdin first.

    With bboxes set, the first multipolygon read from the subject or stdin is
    the subject. Files whose name carries a bounding box that misses the
    subject's are never opened, and multipolygons whose bounding box misses it
    are dropped. If there is no subject, or it is empty, nothing is yielded.
    """
    if warn is None:
        warn = logger.warning

    head_sources = [source for source in sources if source.kind != SourceKind.FILE]
    file_paths = [source.path for source in sources if source.kind == SourceKind.FILE]

    head = itertools.chain.from_iterable(
        read_source(source, warn) for source in head_sources
    )

    num_multipolygons = 0
    num_points = 0

    if not bboxes:
        for multipolygon in itertools.chain(head, _read_files(file_paths, warn)):
            num_multipolygons += 1
            num_points += count_points(multipolygon)
            yield multipolygon

        logger.info(
            "Read %d multipolygon(s) with %d point(s)", num_multipolygons, num_points
        )
        return

    subject = next(head, None)
    if not subject:
        logger.info("No subject geometry to take a bounding box from, skipping inputs")
        return

    subject_bbox = bbox.bbox_from_multipolygon(subject)
    logger.info("Subject bounding box is %s", subject_bbox.as_list())

    kept_paths = bbox.filter_paths(file_paths, subject_bbox)
    if len(kept_paths) < len(file_paths):
        logger.info(
            "Skipping %d of %d file(s) with a bounding box outside the subject",
            len(file_paths) - len(kept_paths),
            len(file_paths),
        )

    yield subject

    num_dropped = 0
    for multipolygon in itertools.chain(head, _read_files(kept_paths, warn)):
        if not bbox.multipolygon_overlaps(multipolygon, subject_bbox):
            num_dropped += 1
            continue

        num_multipolygons += 1
        num_points += count_points(multipolygon)
        yield multipolygon

    logger.info(
        "Read %d multipolygon(s) with %d point(s) besides the subject, "
        "dropped %d outside its bounding box",
        num_multipolygons,
        num_points,
        num_dropped,
    )


def gather_inputs(
    positionals: Sequence[StrPath],
    subject: Optional[StrPath] = None,
    stdin: Optional[IO[bytes]] = None,
    bboxes: bool = False,
    warn: Optional[parse.Warn] = None,
) -> List[MultiPolygon]:
    """Read every input into one ordered list of multipolygons"""
    sources = resolve_sources(positionals, subject=subject, stdin=stdin)
    return list(iter_inputs(sources, warn=warn, bboxes=bboxes))
