"""Debris core: size framing, chunk encode/decode, canonical ordering.

Every value is written as a self-describing chunk:

    BYTES          (0x00)  raw bytes, verbatim
    BOOLEAN        (0x01)  one byte, 0x00 or 0x01
    NUMBER         (0x02)  decimal text, UTF-8
    TEXT           (0x03)  UTF-8 text (names are flattened to text)
    UNORDERED_SEQ  (0x10)  member chunks, sorted by their bytes
    UNORDERED_MAP  (0x11)  key/value chunks, sorted by key chunk bytes
    ORDERED_SEQ    (0x20)  member chunks, input order
    ORDERED_MAP    (0x21)  key/value chunks, input order

Determinism comes from sorting unordered collections on the *serialized*
bytes of their members, never on the native values.  That works for
heterogeneous collections where Python itself can't order the members
(e.g. {1, "a", b"x"}).

Decoding widens: every number comes back as Decimal, every name as str.
"""

from __future__ import annotations

import hashlib
import math
import re
import struct
from collections import OrderedDict, deque
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, List, Tuple

from structlog import get_logger

from ._constants import (
    HEADER_WIDTH,
    MAX_DEPTH,
    MAX_SIZE,
    SIZE_WIDTH,
    TAG_BOOLEAN,
    TAG_BYTES,
    TAG_NAMES,
    TAG_NUMBER,
    TAG_ORDERED_MAP,
    TAG_ORDERED_SEQ,
    TAG_TEXT,
    TAG_UNORDERED_MAP,
    TAG_UNORDERED_SEQ,
    TAG_WIDTH,
)
from ._errors import (
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

logger = get_logger()


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


# ── Size framing ─────────────────────────────────────────────
# Always exactly 4 bytes, big-endian, unsigned.  No varints: the format
# trades compactness for a trivially reproducible layout.

def encode_size(n: int) -> bytes:
    """Pack a payload length into the 4-byte size field."""
    if n < 0:
        raise InvalidSize("negative size {}".format(n))
    if n > MAX_SIZE:
        raise UnsupportedSize("size {} exceeds {}".format(n, MAX_SIZE))
    return struct.pack(">I", n)


def decode_size(data: bytes) -> int:
    """Read the 4-byte size field at the start of data."""
    if len(data) < SIZE_WIDTH:
        raise TruncatedInput("truncated size field")
    return struct.unpack(">I", bytes(data[:SIZE_WIDTH]))[0]


def _frame(tag: int, payload: bytes) -> bytes:
    return bytes([tag]) + encode_size(len(payload)) + payload


# ── Text ─────────────────────────────────────────────────────
# Length on the wire is the UTF-8 byte count, not the character count.

def _utf8(s: str) -> bytes:
    try:
        return s.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidText("string is not encodable as utf-8: {}".format(e.reason)) from e


def _from_utf8(b: bytes) -> str:
    try:
        return b.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidText("invalid utf-8 at byte {}".format(e.start)) from e


# ── Numbers ──────────────────────────────────────────────────
# Numbers travel as their plain decimal text, never in exponent notation.
# int, float and Decimal that print the same share one encoding.

def number_text(val: Any) -> str:
    """Render a number as canonical decimal text."""
    if isinstance(val, int):
        # Going through Decimal avoids the int-to-str digit limit.
        return format(Decimal(val), "f")
    if isinstance(val, float):
        if not math.isfinite(val):
            raise UnsupportedType("non-finite float {!r}".format(val))
        # repr() gives the shortest text that round-trips the float;
        # Decimal re-renders it without an exponent (1e+20 -> 100...0).
        return format(Decimal(repr(val)), "f")
    if isinstance(val, Decimal):
        if not val.is_finite():
            raise UnsupportedType("non-finite decimal {}".format(val))
        return format(val, "f")
    raise UnsupportedType("not a number: {}".format(type(val).__name__))


# Only the fixed-point form number_text() writes is accepted on read.
_NUMBER_TEXT = re.compile(r"-?[0-9]+(\.[0-9]+)?")


def _parse_number(payload: bytes) -> Decimal:
    text = _from_utf8(payload)
    if not _NUMBER_TEXT.fullmatch(text):
        raise MalformedPayload("invalid number text {!r}".format(text))
    return Decimal(text)


# ── Encode ───────────────────────────────────────────────────

def _enter(depth: int, max_depth: int) -> None:
    if depth + 1 > max_depth:
        raise DepthExceeded("depth exceeds {}".format(max_depth))


def _encode_entries(val: Mapping[Any, Any], depth: int,
                    max_depth: int) -> List[Tuple[bytes, bytes]]:
    return [
        (encode_value(k, depth + 1, max_depth), encode_value(v, depth + 1, max_depth))
        for k, v in val.items()
    ]


def encode_value(val: Any, depth: int = 0, max_depth: int = MAX_DEPTH) -> bytes:
    """Encode one value (and everything nested in it) into a chunk.

    The depth parameter tracks collection nesting: root call starts at 0
    and entering any collection checks depth+1 against max_depth.
    """
    # bool is a subclass of int, so it has to be checked first or True
    # would go out as the number "1".
    if isinstance(val, bool):
        return _frame(TAG_BOOLEAN, b"\x01" if val else b"\x00")

    if isinstance(val, (int, float, Decimal)):
        return _frame(TAG_NUMBER, _utf8(number_text(val)))

    # Keyword and Symbol are NamedTuples: check them before tuple.
    if isinstance(val, (Keyword, Symbol)):
        return _frame(TAG_TEXT, _utf8(str(val)))

    if isinstance(val, str):
        return _frame(TAG_TEXT, _utf8(val))

    if isinstance(val, (bytes, bytearray, memoryview)):
        return _frame(TAG_BYTES, bytes(val))

    # OrderedDict is a dict: check it first.
    if isinstance(val, OrderedDict):
        _enter(depth, max_depth)
        entries = _encode_entries(val, depth, max_depth)
        return _frame(TAG_ORDERED_MAP, b"".join(k + v for k, v in entries))

    if isinstance(val, Mapping):
        _enter(depth, max_depth)
        entries = _encode_entries(val, depth, max_depth)
        # Sort on the key chunk only; each value stays glued to its key.
        # bytes comparison is unsigned lexicographic, shorter prefix first.
        entries.sort(key=lambda kv: kv[0])
        return _frame(TAG_UNORDERED_MAP, b"".join(k + v for k, v in entries))

    if isinstance(val, (set, frozenset)):
        _enter(depth, max_depth)
        chunks = sorted(encode_value(item, depth + 1, max_depth) for item in val)
        return _frame(TAG_UNORDERED_SEQ, b"".join(chunks))

    if isinstance(val, (list, tuple, deque)):
        _enter(depth, max_depth)
        chunks = [encode_value(item, depth + 1, max_depth) for item in val]
        return _frame(TAG_ORDERED_SEQ, b"".join(chunks))

    raise UnsupportedType("unsupported type: {}".format(type(val).__name__))


# ── Decode ───────────────────────────────────────────────────

def _freeze(val: Any) -> Any:
    """Make a decoded value usable as a set member or map key."""
    if isinstance(val, (list, tuple)):
        return tuple(_freeze(v) for v in val)
    if isinstance(val, (set, frozenset)):
        return frozenset(_freeze(v) for v in val)
    if isinstance(val, dict):
        return tuple((_freeze(k), _freeze(v)) for k, v in val.items())
    return val


def _read_header(buf: bytes, off: int, end: int, max_size: int) -> Tuple[int, int, int]:
    """Read tag and size at off.  Returns (tag, payload_start, payload_stop)."""
    if off >= end:
        raise TruncatedInput("truncated tag")
    tag = buf[off]
    if tag not in TAG_NAMES:
        raise UnknownTag("unknown tag 0x{:02x}".format(tag))
    if off + HEADER_WIDTH > end:
        raise TruncatedInput("truncated size field")
    size = decode_size(buf[off + TAG_WIDTH:off + HEADER_WIDTH])
    if size > max_size:
        raise UnsupportedSize("size {} exceeds {}".format(size, max_size))
    start = off + HEADER_WIDTH
    stop = start + size
    if stop > end:
        raise TruncatedInput(
            "{} payload needs {} bytes, {} left".format(TAG_NAMES[tag], size, end - start))
    return tag, start, stop


def _decode_members(buf: bytes, start: int, stop: int, depth: int,
                    max_depth: int, max_size: int) -> List[Any]:
    members: List[Any] = []
    off = start
    while off < stop:
        item, off = _decode_one(buf, off, stop, depth, max_depth, max_size)
        members.append(item)
    return members


def _pairs(members: List[Any]) -> List[Tuple[Any, Any]]:
    if len(members) % 2:
        raise MalformedPayload("map payload has a key without a value")
    return [(_freeze(k), v) for k, v in zip(members[0::2], members[1::2])]


def _decode_scalar(tag: int, payload: bytes) -> Any:
    if tag == TAG_BYTES:
        return payload
    if tag == TAG_BOOLEAN:
        if payload not in (b"\x00", b"\x01"):
            raise MalformedPayload("invalid boolean payload {!r}".format(payload))
        return payload == b"\x01"
    if tag == TAG_NUMBER:
        return _parse_number(payload)
    return _from_utf8(payload)


def _decode_one(buf: bytes, off: int, end: int, depth: int,
                max_depth: int, max_size: int) -> Tuple[Any, int]:
    """Decode the chunk at off, never reading past end.  Returns (value, next_off)."""
    tag, start, stop = _read_header(buf, off, end, max_size)
    if tag < TAG_UNORDERED_SEQ:
        return _decode_scalar(tag, buf[start:stop]), stop

    # Everything left is a collection.
    _enter(depth, max_depth)
    members = _decode_members(buf, start, stop, depth + 1, max_depth, max_size)

    if tag == TAG_UNORDERED_SEQ:
        return {_freeze(m) for m in members}, stop
    if tag == TAG_UNORDERED_MAP:
        return dict(_pairs(members)), stop
    if tag == TAG_ORDERED_MAP:
        return OrderedDict(_pairs(members)), stop
    return members, stop


def decode_chunk(data: bytes, max_depth: int = MAX_DEPTH,
                 max_size: int = MAX_SIZE) -> Tuple[Any, bytes]:
    """Decode the first chunk of data.  Returns (value, remaining_bytes).

    Empty input is the end of a chunk sequence and returns (None, b"").
    None is not an encodable value, so it can't be mistaken for one.
    """
    buf = bytes(data)
    if not buf:
        return None, b""
    value, off = _decode_one(buf, 0, len(buf), 0, max_depth, max_size)
    return value, buf[off:]


def decode_root(data: bytes, strict: bool = False, max_depth: int = MAX_DEPTH,
                max_size: int = MAX_SIZE) -> Any:
    """Decode the first top-level chunk; trailing bytes are ignored unless strict."""
    buf = bytes(data)
    if not buf:
        raise TruncatedInput("empty input")
    value, off = _decode_one(buf, 0, len(buf), 0, max_depth, max_size)
    if off != len(buf):
        if strict:
            raise TrailingData("{} trailing bytes after root chunk".format(len(buf) - off))
        logger.debug("trailing bytes ignored", consumed=off, trailing=len(buf) - off)
    return value


def decode_stream(data: bytes, max_depth: int = MAX_DEPTH,
                  max_size: int = MAX_SIZE) -> List[Any]:
    """Decode every top-level chunk of a concatenated stream, in order."""
    buf = bytes(data)
    values: List[Any] = []
    off = 0
    while off < len(buf):
        value, off = _decode_one(buf, off, len(buf), 0, max_depth, max_size)
        values.append(value)
    logger.debug("decoded chunk stream", values=len(values), size=len(buf))
    return values
