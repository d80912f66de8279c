"""JSON adapter: JSON documents in, JSON-compatible data out.

Inbound (JSON → encodable value):
    JSON object  → dict       (UNORDERED_MAP)
    JSON array   → list       (ORDERED_SEQ)
    JSON string  → str        (TEXT)
    JSON boolean → bool       (BOOLEAN)
    JSON number  → Decimal    (NUMBER)
    JSON null    → UnsupportedType

JSON numbers are parsed straight into Decimal through the parse_float and
parse_int hooks, so "30.10" keeps its trailing zero instead of going
through a binary float, and long integers skip the int-from-str digit limit.

Outbound (decoded value → JSON-compatible data) is lossy by necessity:
bytes become {"$bytes": "<hex>"}, sets become lists, Decimals become JSON
numbers, and non-string map keys are rendered as their JSON text.  A map
whose keys render to the same JSON key (e.g. "1" and 1) raises
UnsupportedType rather than silently dropping one entry.  Sets and
unordered maps are emitted in canonical (encoded-bytes) order so the output
is as deterministic as the encoding.
"""

from __future__ import annotations

import json
import re
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, Iterable, Tuple

from ._core import encode_value
from ._errors import InvalidText, UnsupportedType

# Leading whitespace pattern for BOM detection.
_WS = re.compile(rb"^[\x20\x09\x0A\x0D]*")


def _reject_constant(token: str) -> Any:
    """Called by json.loads for NaN, Infinity and -Infinity."""
    raise UnsupportedType("JSON constant not allowed: {}".format(token))


def json_to_value(raw: bytes) -> Any:
    """Parse raw UTF-8 JSON bytes into a value serialize() accepts."""
    m = _WS.match(raw)
    start = m.end() if m else 0
    if raw[start:start + 3] == b"\xef\xbb\xbf":
        raise InvalidText("UTF-8 BOM rejected")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidText("invalid UTF-8 in JSON input") from e

    obj = json.loads(text, parse_float=Decimal, parse_int=Decimal,
                     parse_constant=_reject_constant)
    _reject_nulls(obj)
    return obj


def _reject_nulls(x: Any) -> None:
    if x is None:
        raise UnsupportedType("JSON null not allowed")
    if isinstance(x, dict):
        for v in x.values():
            _reject_nulls(v)
    elif isinstance(x, list):
        for v in x:
            _reject_nulls(v)


# ── Decoded value → JSON-compatible data ──────────────────────

def _number_to_json(d: Decimal) -> Any:
    # "10" stays an integer; "1.0" and "30.1" become floats.
    if d.as_tuple().exponent >= 0:
        return int(d)
    return float(d)


def _key_to_json(k: Any) -> str:
    if isinstance(k, str):
        return k
    return json.dumps(value_to_json(k), separators=(",", ":"))


def _map_to_json(items: Iterable[Tuple[Any, Any]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in items:
        key = _key_to_json(k)
        if key in out:
            raise UnsupportedType("map keys collide in JSON form: {!r}".format(key))
        out[key] = value_to_json(v)
    return out


def value_to_json(x: Any) -> Any:
    """Convert a decoded value into data json.dumps() can write."""
    if isinstance(x, bool) or isinstance(x, str):
        return x

    if isinstance(x, Decimal):
        return _number_to_json(x)

    if isinstance(x, (int, float)):
        return x

    if isinstance(x, bytes):
        return {"$bytes": x.hex()}

    if isinstance(x, OrderedDict):
        return _map_to_json(x.items())

    if isinstance(x, dict):
        return _map_to_json((k, x[k]) for k in sorted(x, key=encode_value))

    if isinstance(x, (set, frozenset)):
        return [value_to_json(v) for v in sorted(x, key=encode_value)]

    if isinstance(x, (list, tuple)):
        return [value_to_json(v) for v in x]

    raise UnsupportedType("no JSON form for {}".format(type(x).__name__))
