"""
Flag composition for libmagic queries.
"""
from typing import Iterable, Optional

from filemagic.base import MagicOption, QueryMode


def combine_flags(mode: QueryMode, options: Optional[Iterable[Optional[MagicOption]]] = None) -> int:
    """
    Combine a query mode with option toggles into one libmagic flag value.

    None entries are skipped; repeated options are harmless.

    Args:
        mode: Base query mode
        options: Option toggles, may be None or contain None

    Returns:
        Integer suitable for magic_setflags
    """
    flags = mode.value
    for option in options or ():
        if option is not None:
            flags |= option.value
    return flags
