"""
Parser for libmagic's extension answer.
"""
from typing import FrozenSet

EXTENSION_SEPARATOR = '/'


def parse_extensions(raw: str) -> FrozenSet[str]:
    """
    Split a slash-delimited extension list into a set.

    "jpeg/jpg/jpe" -> {"jpeg", "jpg", "jpe"}.  An empty string yields an
    empty set.  libmagic's "???" marker for an unknown extension is kept
    as-is.
    """
    return frozenset(token for token in raw.split(EXTENSION_SEPARATOR) if token)
