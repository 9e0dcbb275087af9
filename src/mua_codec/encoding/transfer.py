"""Base64 body transport and RFC 2047 encoded words.

Only the ``=?utf-8?B?...?=`` form of encoded word is produced or recognized;
it is used for the Subject header. Bodies are Base64 encoded on a single line.
"""

from __future__ import annotations

import base64
import binascii

from mua_codec.exceptions import FormatError, require

WORD_PREFIX = "=?utf-8?B?"
WORD_SUFFIX = "?="


def encode(body: str) -> str:
    """Base64 encode the UTF-8 bytes of ``body``."""
    return base64.b64encode(require(body, "body").encode("utf-8")).decode("ascii")


def decode(text: str) -> str:
    """Decode a Base64 body back to text.

    Line breaks and surrounding whitespace are ignored.

    Raises:
        FormatError: If the text is not Base64 or does not carry UTF-8.
    """
    compact = "".join(require(text, "text").split())
    try:
        return base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise FormatError(f"Invalid base64 body: {e}") from e


def is_encoded_word(text: str) -> bool:
    return (
        text.startswith(WORD_PREFIX)
        and text.endswith(WORD_SUFFIX)
        and len(text) >= len(WORD_PREFIX) + len(WORD_SUFFIX)
    )


def encode_word(text: str) -> str:
    """Wrap ``text`` in a ``=?utf-8?B?...?=`` encoded word."""
    return f"{WORD_PREFIX}{encode(text)}{WORD_SUFFIX}"


def decode_word(text: str) -> str:
    """Unwrap an encoded word; any other text is returned unchanged."""
    if not is_encoded_word(require(text, "text")):
        return text
    return decode(text[len(WORD_PREFIX) : -len(WORD_SUFFIX)])
