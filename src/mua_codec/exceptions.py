"""Custom exceptions for the mua codec."""


class MuaCodecError(Exception):
    """Base exception for all codec errors."""


class FormatError(MuaCodecError):
    """Exception raised for malformed address, header, date or boundary text."""


class ValidationError(MuaCodecError):
    """Exception raised when a value violates a structural rule.

    Examples are a missing essential header, an empty subject or an illegal
    content type / charset pairing.
    """


class NullInputError(MuaCodecError):
    """Exception raised when a required argument is absent."""


def require(value, name: str):
    """Return ``value`` or raise NullInputError when it is None."""
    if value is None:
        raise NullInputError(f"{name} is required")
    return value
