"""Helper methods for resolving where input GeoJSON is read from"""

import contextlib
import enum
import pathlib
from typing import IO, Iterator, List, NamedTuple, Optional, Sequence, Union

from polyclip.utils.log import getLogger

from .common import GEOMETRY_FILE_SUFFIXES

logger = getLogger(__file__)

StrPath = Union[str, pathlib.Path]


@enum.unique
class SourceKind(str, enum.Enum):
    """Places input GeoJSON can come from."""

    SUBJECT = "subject"
    STDIN = "stdin"
    FILE = "file"


class InputSource(NamedTuple):
    kind: SourceKind
    path: Optional[pathlib.Path] = None
    stream: Optional[IO[bytes]] = None

    @property
    def name(self) -> str:
        return str(self.path) if self.path else "<stdin>"

    @contextlib.contextmanager
    def open(self) -> Iterator[IO[bytes]]:
        """Yield a readable binary stream. Passed in streams are left open."""
        if self.stream is not None:
            yield self.stream
            return

        if self.path is None:
            raise ValueError(f"{self.kind.value} source has no path or stream")

        with self.path.open("rb") as source_file:
            yield source_file


def iter_data_paths(
    data_dir: pathlib.Path, suffixes: Sequence[str] = GEOMETRY_FILE_SUFFIXES
) -> Iterator[pathlib.Path]:
    """Return paths to geometry files in data_dir, sorted by name.

    Subdirectories and hidden files are ignored.
    """
    for filepath in sorted(data_dir.iterdir()):
        if filepath.name.startswith("."):
            continue

        if filepath.suffix not in suffixes:
            continue

        if not filepath.is_file():
            continue

        yield filepath


def resolve_positional(positional: StrPath) -> List[pathlib.Path]:
    """Resolve a file or directory argument to the files it stands for"""
    path = pathlib.Path(positional)

    if path.is_dir():
        return list(iter_data_paths(path))

    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {positional}")

    return [path]


def resolve_sources(
    positionals: Sequence[StrPath],
    subject: Optional[StrPath] = None,
    stdin: Optional[IO[bytes]] = None,
) -> List[InputSource]:
    """Return all sources in the order they are consumed.

    The subject comes first, then stdin, then positional files in the order
    given with directories expanded in place. Pass stdin only when it is
    piped, never when it is an interactive terminal.
    """
    sources = []

    if subject:
        subject_path = pathlib.Path(subject)
        if not subject_path.is_file():
            raise FileNotFoundError(f"Subject file not found: {subject}")

        sources.append(InputSource(SourceKind.SUBJECT, path=subject_path))

    if stdin is not None:
        sources.append(InputSource(SourceKind.STDIN, stream=stdin))

    for positional in positionals:
        for path in resolve_positional(positional):
            sources.append(InputSource(SourceKind.FILE, path=path))

    logger.info(
        "Resolved %d input source(s) from %d positional(s)",
        len(sources),
        len(positionals),
    )

    return sources
