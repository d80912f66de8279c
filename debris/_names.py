"""Symbolic names: keywords and symbols with an optional namespace.

Both flatten to text on the wire ("namespace/name" or just "name"), so a
name and a plain string with the same text encode identically and decode
as a plain str.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from ._constants import NAME_SEPARATOR


class Keyword(NamedTuple):
    name: str
    namespace: Optional[str] = None

    def __str__(self) -> str:
        return join_name(self.name, self.namespace)


class Symbol(NamedTuple):
    name: str
    namespace: Optional[str] = None

    def __str__(self) -> str:
        return join_name(self.name, self.namespace)


def join_name(name: str, namespace: Optional[str] = None) -> str:
    """Flatten a namespaced name into the text that goes on the wire."""
    if namespace is None:
        return name
    return namespace + NAME_SEPARATOR + name
