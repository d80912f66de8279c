"""Debris constants: chunk framing, variant tags and safety limits.

Every value on the wire is a chunk:

    tag (1 byte) | length (4 bytes, uint32 big-endian) | payload (length bytes)

The tag says how to read the payload.  Collections nest chunks inside their
payload with no separators; each sub-chunk carries its own length.
"""

from __future__ import annotations

from typing import Dict

# ── Chunk framing ────────────────────────────────────────────
TAG_WIDTH: int = 1
SIZE_WIDTH: int = 4
HEADER_WIDTH: int = TAG_WIDTH + SIZE_WIDTH

# Largest length a 4-byte size field can hold.
MAX_SIZE: int = 2**32 - 1

# ── Variant tags (single byte each) ──────────────────────────
# 0x0_ are scalars, 0x1_ unordered collections, 0x2_ ordered collections.
TAG_BYTES: int = 0x00
TAG_BOOLEAN: int = 0x01
TAG_NUMBER: int = 0x02
TAG_TEXT: int = 0x03
TAG_UNORDERED_SEQ: int = 0x10
TAG_UNORDERED_MAP: int = 0x11
TAG_ORDERED_SEQ: int = 0x20
TAG_ORDERED_MAP: int = 0x21

TAG_NAMES: Dict[int, str] = {
    TAG_BYTES: "BYTES",
    TAG_BOOLEAN: "BOOLEAN",
    TAG_NUMBER: "NUMBER",
    TAG_TEXT: "TEXT",
    TAG_UNORDERED_SEQ: "UNORDERED_SEQ",
    TAG_UNORDERED_MAP: "UNORDERED_MAP",
    TAG_ORDERED_SEQ: "ORDERED_SEQ",
    TAG_ORDERED_MAP: "ORDERED_MAP",
}

# Separator used when flattening a namespaced name into text.
NAME_SEPARATOR: str = "/"

# ── Recursion limit ──────────────────────────────────────────
# Encode and decode recurse once per nesting level.  This default keeps
# adversarial input far away from CPython's own recursion limit.
MAX_DEPTH: int = 128
