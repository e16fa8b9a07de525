"""Split a stream of concatenated JSON values into text fragments

Inputs are zero or more JSON objects written back to back, with nothing but
optional whitespace between them:

    {"type": "Polygon", ...}{"type": "Feature", ...}
    {"type": "MultiPolygon", ...}

Fragments are delimited by tracking bracket depth and string state, so a
`}{` inside a string value is never mistaken for an object boundary. Nothing
is decoded here, that happens when the fragments are parsed.
"""

import codecs
import re
from typing import IO, Iterable, Iterator, List, Union

# Bytes requested from the stream per read
CHUNK_SIZE = 64 * 1024

_STRUCTURAL_RE = re.compile(r'["{}\[\]]')
_STRING_SPECIAL_RE = re.compile(r'["\\]')


class InvalidJSONError(ValueError):
    """A fragment of an input stream is not valid JSON."""


def iter_chunks(
    stream: Union[IO[bytes], IO[str]], chunk_size: int = CHUNK_SIZE
) -> Iterator[str]:
    """Read a binary or text stream as decoded text chunks.

    Binary streams are decoded as UTF-8 incrementally, so a multi-byte
    character split across two reads is reassembled. A leading BOM is dropped.
    """
    decoder = codecs.getincrementaldecoder("utf-8-sig")()

    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break

        if isinstance(chunk, bytes):
            chunk = decoder.decode(chunk)

        if chunk:
            yield chunk

    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


def split_values(chunks: Iterable[str]) -> Iterator[str]:
    """Yield each top-level JSON value in chunks as stripped text.

    An empty or whitespace-only input yields nothing. Content that is not part
    of a top-level value stays attached to a neighbouring fragment, which then
    fails to decode.
    """
    fragment: List[str] = []
    depth = 0
    in_string = False
    escaped = False
    # A complete top-level value has been seen since the last split
    closed = False

    for chunk in chunks:
        start = 0
        pos = 0
        size = len(chunk)

        while pos < size:
            if in_string:
                if escaped:
                    escaped = False
                    pos += 1
                    continue

                match = _STRING_SPECIAL_RE.search(chunk, pos)
                if not match:
                    break

                pos = match.end()
                if match.group() == "\\":
                    escaped = True
                else:
                    in_string = False
                continue

            match = _STRUCTURAL_RE.search(chunk, pos)
            if not match:
                break

            char = match.group()
            pos = match.end()

            if char == '"':
                in_string = True
            elif char in "{[":
                if depth == 0 and closed:
                    fragment.append(chunk[start : match.start()])
                    text = "".join(fragment).strip()
                    if text:
                        yield text

                    fragment = []
                    start = match.start()
                    closed = False

                depth += 1
            else:
                depth -= 1
                if depth == 0:
                    closed = True

        fragment.append(chunk[start:])

    text = "".join(fragment).strip()
    if text:
        yield text


def split_stream(
    stream: Union[IO[bytes], IO[str]], chunk_size: int = CHUNK_SIZE
) -> Iterator[str]:
    """Lazily split a stream into individually parseable JSON fragments"""
    yield from split_values(iter_chunks(stream, chunk_size=chunk_size))
