"""debris: deterministic binary serializer.

Encode structured values into an exact, reproducible byte sequence.
Unordered collections are written in a canonical order, so equal values
always produce equal bytes no matter how their dicts and sets were built.

Quick start:
    >>> from debris import serialize, deserialize
    >>> serialize({True: 10, False: 20}) == serialize({False: 20, True: 10})
    True
    >>> deserialize(serialize({"temp": 30.1}))
    {'temp': Decimal('30.1')}

Decoding widens types: every number comes back as a Decimal, and
keywords/symbols come back as plain strings.
"""

from __future__ import annotations

from typing import Any, List

from ._constants import MAX_DEPTH, MAX_SIZE
from ._core import (
    _sha256_hex,
    decode_chunk,
    decode_root,
    decode_size,
    decode_stream,
    encode_size,
    encode_value,
)
from ._errors import (
    ERR_INVALID_SIZE,
    ERR_INVALID_TEXT,
    ERR_LIMIT_DEPTH,
    ERR_MALFORMED_PAYLOAD,
    ERR_TRAILING_DATA,
    ERR_TRUNCATED_INPUT,
    ERR_UNKNOWN_TAG,
    ERR_UNSUPPORTED_SIZE,
    ERR_UNSUPPORTED_TYPE,
    DebrisError,
    DepthExceeded,
    InvalidSize,
    InvalidText,
    MalformedPayload,
    TrailingData,
    TruncatedInput,
    UnknownTag,
    UnsupportedSize,
    UnsupportedType,
)
from ._names import Keyword, Symbol

__version__ = "0.1.0"

__all__ = [
    # Public API functions
    "serialize",
    "deserialize",
    "deserialize_all",
    "fingerprint",
    "encode_size",
    "decode_size",
    "decode_chunk",
    # Name types
    "Keyword",
    "Symbol",
    # Limits
    "MAX_DEPTH",
    "MAX_SIZE",
    # Exceptions
    "DebrisError",
    "InvalidSize",
    "UnsupportedSize",
    "UnsupportedType",
    "UnknownTag",
    "TruncatedInput",
    "InvalidText",
    "MalformedPayload",
    "DepthExceeded",
    "TrailingData",
    # Error codes
    "ERR_INVALID_SIZE",
    "ERR_UNSUPPORTED_SIZE",
    "ERR_UNSUPPORTED_TYPE",
    "ERR_UNKNOWN_TAG",
    "ERR_TRUNCATED_INPUT",
    "ERR_INVALID_TEXT",
    "ERR_MALFORMED_PAYLOAD",
    "ERR_LIMIT_DEPTH",
    "ERR_TRAILING_DATA",
]


# ── Core API ──────────────────────────────────────────────────

def serialize(value: Any, *, max_depth: int = MAX_DEPTH) -> bytes:
    """Encode a value into its canonical byte sequence.

    Accepts bytes, bool, int, float, Decimal, str, Keyword, Symbol, set,
    frozenset, dict, OrderedDict, list, tuple and deque, nested freely.
    Anything else raises UnsupportedType.
    """
    return encode_value(value, 0, max_depth)


def deserialize(data: bytes, *, strict: bool = False,
                max_depth: int = MAX_DEPTH, max_size: int = MAX_SIZE) -> Any:
    """Decode the first value in data.

    Bytes after the first top-level chunk are ignored (and logged at debug
    level) unless strict=True, which raises TrailingData.  max_size caps
    the length any chunk may claim, for input you don't trust.
    """
    return decode_root(data, strict, max_depth, max_size)


def deserialize_all(data: bytes, *, max_depth: int = MAX_DEPTH,
                    max_size: int = MAX_SIZE) -> List[Any]:
    """Decode a stream of concatenated top-level chunks into a list."""
    return decode_stream(data, max_depth, max_size)


def fingerprint(value: Any) -> str:
    """Return a stable identifier: "debris:" + sha256 hex of the encoding."""
    return "debris:" + _sha256_hex(serialize(value))
