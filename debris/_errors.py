"""Debris error codes and exception classes.

Every failure is raised as a DebrisError carrying a stable `.code` string.
Each kind also has its own subclass so callers can catch exactly the
failures they care about, e.g. telling malformed input apart from an
unsupported value.
"""

from __future__ import annotations

# ── Error codes ──────────────────────────────────────────────
# Grep-friendly, identical to what the CLI prints.

ERR_INVALID_SIZE: str = "ERR_INVALID_SIZE"            # negative size
ERR_UNSUPPORTED_SIZE: str = "ERR_UNSUPPORTED_SIZE"    # size over the limit
ERR_UNSUPPORTED_TYPE: str = "ERR_UNSUPPORTED_TYPE"    # value outside the table
ERR_UNKNOWN_TAG: str = "ERR_UNKNOWN_TAG"              # undefined tag byte
ERR_TRUNCATED_INPUT: str = "ERR_TRUNCATED_INPUT"      # ran out of bytes
ERR_INVALID_TEXT: str = "ERR_INVALID_TEXT"            # not valid UTF-8
ERR_MALFORMED_PAYLOAD: str = "ERR_MALFORMED_PAYLOAD"  # bad payload contents
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"              # nesting too deep
ERR_TRAILING_DATA: str = "ERR_TRAILING_DATA"          # bytes after the root


class DebrisError(Exception):
    """Base exception for every encode/decode failure.

    The `.code` attribute is one of the ERR_* strings above.
    """

    code: str = ""

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


class _CodedError(DebrisError):
    # Subclasses fix their own code, so they are raised with a message only.
    def __init__(self, msg: str = "") -> None:
        super().__init__(type(self).code, msg)


class InvalidSize(_CodedError):
    code = ERR_INVALID_SIZE


class UnsupportedSize(_CodedError):
    code = ERR_UNSUPPORTED_SIZE


class UnsupportedType(_CodedError):
    code = ERR_UNSUPPORTED_TYPE


class UnknownTag(_CodedError):
    code = ERR_UNKNOWN_TAG


class TruncatedInput(_CodedError):
    code = ERR_TRUNCATED_INPUT


class InvalidText(_CodedError):
    code = ERR_INVALID_TEXT


class MalformedPayload(_CodedError):
    code = ERR_MALFORMED_PAYLOAD


class DepthExceeded(_CodedError):
    code = ERR_LIMIT_DEPTH


class TrailingData(_CodedError):
    code = ERR_TRAILING_DATA
