"""7-bit cleanliness check shared by every textual field."""

from __future__ import annotations

from mua_codec.exceptions import require


def is_ascii(text: str) -> bool:
    """Return True when every character of ``text`` is at most 0x7F."""
    return require(text, "text").isascii()
