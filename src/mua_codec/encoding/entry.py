"""Message framing.

Splits raw message text into fragments (a header list plus a raw body) and
joins rendered parts back together with the fixed ``frontier`` boundary.

Bodies are assumed never to contain a ``--frontier`` line of their own; the
message model rejects raw bodies that do.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from mua_codec.exceptions import FormatError, require

logger = structlog.get_logger()

BOUNDARY = "frontier"
DELIMITER = f"--{BOUNDARY}"
CLOSE_DELIMITER = f"--{BOUNDARY}--"
MULTIPART_PLACEHOLDER = "This is a message with multiple parts in MIME format."

# Field names are printable ASCII other than space and colon.
_HEADER_LINE = re.compile(r"[!-9;-~]+:")

RawHeader = tuple[str, str]


@dataclass(frozen=True)
class Fragment:
    """One decoded unit of a message: its raw headers and its raw body.

    Header names are lower-cased; values are stripped of surrounding
    whitespace but otherwise untouched.
    """

    raw_headers: tuple[RawHeader, ...]
    raw_body: str

    def header(self, name: str) -> str | None:
        """Return the first value of header ``name`` (case-insensitive)."""
        name = name.lower()
        for key, value in self.raw_headers:
            if key == name:
                return value
        return None


def _parse_header_line(line: str) -> RawHeader:
    name, colon, value = line.partition(":")
    if not colon or not _HEADER_LINE.match(line):
        raise FormatError(f"Malformed header line: {line!r}")
    return name.strip().lower(), value.strip()


def _read_headers(lines: Sequence[str], start: int = 0) -> tuple[list[RawHeader], int]:
    """Read a header block starting at ``lines[start]``.

    A blank line ends the block once a Content-Type has been read. Before
    that, a blank line followed by another header line is only the gap
    between the message headers and the first part's headers.

    Returns:
        The headers and the index of the first body line.
    """
    headers: list[RawHeader] = []
    index = start
    while index < len(lines):
        line = lines[index]
        if line == "":
            has_content_type = any(name == "content-type" for name, _ in headers)
            following = lines[index + 1] if index + 1 < len(lines) else ""
            if has_content_type or not _HEADER_LINE.match(following):
                return headers, index + 1
        else:
            headers.append(_parse_header_line(line))
        index += 1
    return headers, index


def parse_content_type(value: str) -> tuple[str, dict[str, str]]:
    """Split a Content-Type value into its lower-cased kind and parameters.

    ``text/plain; charset="utf-8"`` gives ``("text/plain", {"charset": "utf-8"})``.
    """
    kind, *params = require(value, "value").split(";")
    parameters = {}
    for param in params:
        if not param.strip():
            continue
        key, equals, raw = param.partition("=")
        if not equals:
            raise FormatError(f"Malformed Content-Type parameter: {param!r}")
        parameters[key.strip().lower()] = raw.strip().strip('"')
    return kind.strip().lower(), parameters


def _content_type(headers: Iterable[RawHeader]) -> tuple[str, dict[str, str]]:
    for name, value in headers:
        if name == "content-type":
            return parse_content_type(value)
    raise FormatError("Missing Content-Type header")


def _is_multipart(headers: Iterable[RawHeader]) -> bool:
    kind, parameters = _content_type(headers)
    if kind != "multipart/alternative":
        return False
    boundary = parameters.get("boundary")
    if boundary != BOUNDARY:
        raise FormatError(f"Unsupported multipart boundary: {boundary!r}")
    return True


def _split_parts(lines: Sequence[str]) -> list[list[str]]:
    chunks: list[list[str]] = [[]]
    for index, line in enumerate(lines):
        if line == CLOSE_DELIMITER:
            trailing = [rest for rest in lines[index + 1 :] if rest.strip()]
            if trailing:
                logger.debug("entry_epilogue_ignored", lines=len(trailing))
            return chunks
        if line == DELIMITER:
            chunks.append([])
        else:
            chunks[-1].append(line)
    raise FormatError(f"Missing closing boundary {CLOSE_DELIMITER!r}")


def decode(text: str) -> list[Fragment]:
    """Split raw message text into fragments.

    The first fragment carries the message headers together with the
    headers of the first part. For multipart/alternative messages every
    further fragment carries only its own part headers.

    Raises:
        FormatError: On malformed header lines, a missing Content-Type, or a
            multipart message with a missing or malformed boundary.
    """
    lines = require(text, "text").replace("\r\n", "\n").split("\n")
    headers, body_start = _read_headers(lines)

    if not _is_multipart(headers):
        return [Fragment(tuple(headers), "\n".join(lines[body_start:]))]

    chunks = _split_parts(lines[body_start:])
    if len(chunks) < 2:
        raise FormatError("Multipart message without part boundaries")
    fragments = [Fragment(tuple(headers), "\n".join(chunks[0]))]
    for chunk in chunks[1:]:
        part_headers, part_body_start = _read_headers(chunk)
        if not part_headers:
            raise FormatError("Multipart part without headers")
        if _is_multipart(part_headers):
            raise FormatError("Nested multipart parts are not supported")
        fragments.append(Fragment(tuple(part_headers), "\n".join(chunk[part_body_start:])))

    logger.debug("entry_decoded", fragments=len(fragments))
    return fragments


def encode(header_lines: Iterable[str], parts: Sequence[str]) -> str:
    """Join message header lines and rendered parts into message text."""
    head = "\n".join(header_lines)
    if len(parts) == 1:
        return f"{head}\n\n{parts[0]}"
    separator = f"\n{DELIMITER}\n"
    return f"{head}\n\n{separator.join(parts)}\n{CLOSE_DELIMITER}"
