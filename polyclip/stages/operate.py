"""Code for running the boolean operation and writing out its result"""

import math
import os
import pathlib
import re
import sys
from typing import IO, Any, Dict, Iterable, Optional, Sequence, Union

import orjson

from polyclip.utils.log import getLogger

from ..utils import clipping, misc
from . import ingest, parse
from .common import MultiPolygon, Operation, count_points
from .sources import StrPath, resolve_sources

logger = getLogger(__file__)

FeatureId = Union[str, int, float]

# Permissions of a newly created output file
OUTPUT_FILE_MODE = 0o644

# Ids spelled exactly like a JSON number become numeric ids
INT_ID_RE = re.compile(r"-?[0-9]+")
FLOAT_ID_RE = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")


def run(
    operation: Union[Operation, str],
    multipolygons: Iterable[MultiPolygon],
    max_points: Optional[int] = None,
) -> MultiPolygon:
    """Apply operation over all multipolygons, in order.

    When max_points is set, multipolygons are consumed in batches of about
    that many points and each batch is folded into the running result, so the
    inputs never need to be held in memory all at once.
    """
    operation = Operation(operation)

    if not max_points:
        operands = list(multipolygons)
        logger.info(
            "Computing %s of %d multipolygon(s)", operation.value, len(operands)
        )
        return clipping.apply(operation, *operands)

    result: Optional[MultiPolygon] = None
    batches = misc.batch_by_weight(multipolygons, count_points, max_points)

    for batch_no, batch in enumerate(batches, start=1):
        logger.debug(
            "Computing %s of batch %d with %d multipolygon(s)",
            operation.value,
            batch_no,
            len(batch),
        )
        operands = batch if result is None else [result, *batch]
        result = clipping.apply(operation, *operands)

    return result if result is not None else []


def to_feature(
    multipolygon: MultiPolygon, feature_id: Optional[FeatureId] = None
) -> Dict[str, Any]:
    """Wrap a multipolygon up as a GeoJSON Feature"""
    feature: Dict[str, Any] = {
        "type": "Feature",
        "properties": None,
        "geometry": {
            "type": "MultiPolygon",
            "coordinates": multipolygon,
        },
    }

    if feature_id is not None:
        feature["id"] = feature_id

    return feature


def parse_feature_id(value: Optional[str]) -> Optional[FeatureId]:
    """Numbers become numeric ids, anything else stays a string"""
    if value is None:
        return None

    if INT_ID_RE.fullmatch(value):
        return int(value)

    if FLOAT_ID_RE.fullmatch(value):
        number = float(value)
        if math.isfinite(number):
            return number

    return value


def write_feature(
    feature: Dict[str, Any],
    output: Optional[StrPath] = None,
    stdout: Optional[IO[bytes]] = None,
) -> None:
    """Write feature as JSON to the output file, or to stdout if there is none"""
    content = orjson.dumps(feature)

    if not output:
        stream = stdout if stdout is not None else sys.stdout.buffer
        stream.write(content)
        stream.flush()
        return

    output_path = pathlib.Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fd = os.open(output_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, OUTPUT_FILE_MODE)
    with os.fdopen(fd, "wb") as output_file:
        output_file.write(content)

    logger.info("Wrote result to %s", output_path)


def run_operation(
    operation: Union[Operation, str],
    positionals: Sequence[StrPath],
    subject: Optional[StrPath] = None,
    stdin: Optional[IO[bytes]] = None,
    bboxes: bool = False,
    feature_id: Optional[FeatureId] = None,
    output: Optional[StrPath] = None,
    stdout: Optional[IO[bytes]] = None,
    max_points: Optional[int] = None,
    warn: Optional[parse.Warn] = None,
) -> Dict[str, Any]:
    """Read all inputs, compute the operation and write the resulting Feature.

    Nothing is written unless the whole computation succeeds.
    """
    sources = resolve_sources(positionals, subject=subject, stdin=stdin)
    multipolygons = ingest.iter_inputs(sources, warn=warn, bboxes=bboxes)

    result = run(operation, multipolygons, max_points=max_points)
    logger.info("Result has %d polygon(s)", len(result))

    feature = to_feature(result, feature_id)
    write_feature(feature, output=output, stdout=stdout)
    return feature
