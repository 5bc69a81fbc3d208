"""
Base types for the filemagic package.
Defines the query modes, option toggles and engine parameters, plus the
interface shared by every object that can answer a magic query.
"""
from abc import ABC, abstractmethod
from enum import Enum
from os import PathLike
from typing import FrozenSet, Union

from filemagic.native import libmagic

# Anything describe/mime/extensions accept: a path or a byte buffer
Source = Union[str, PathLike, bytes, bytearray, memoryview]


class QueryMode(Enum):
    """Base behaviour requested from libmagic; exactly one per query."""
    DESCRIPTION = libmagic.MAGIC_NONE
    MIME = libmagic.MAGIC_MIME
    EXTENSION = libmagic.MAGIC_EXTENSION


class MagicOption(Enum):
    """Independent toggles OR-ed into the query flags."""
    DEBUG = libmagic.MAGIC_DEBUG
    SYMLINK = libmagic.MAGIC_SYMLINK
    COMPRESS = libmagic.MAGIC_COMPRESS
    COMPRESS_TRANSP = libmagic.MAGIC_COMPRESS_TRANSP
    DEVICES = libmagic.MAGIC_DEVICES
    PRESERVE_ATIME = libmagic.MAGIC_PRESERVE_ATIME


class MagicParam(Enum):
    """Tunable engine limits readable and writable per session."""
    INDIR_MAX = libmagic.MAGIC_PARAM_INDIR_MAX
    NAME_MAX = libmagic.MAGIC_PARAM_NAME_MAX
    ELF_PHNUM_MAX = libmagic.MAGIC_PARAM_ELF_PHNUM_MAX
    ELF_SHNUM_MAX = libmagic.MAGIC_PARAM_ELF_SHNUM_MAX
    ELF_NOTES_MAX = libmagic.MAGIC_PARAM_ELF_NOTES_MAX
    REGEX_MAX = libmagic.MAGIC_PARAM_REGEX_MAX
    BYTES_MAX = libmagic.MAGIC_PARAM_BYTES_MAX


class AbstractMagic(ABC):
    """Abstract base class for magic query front ends."""

    @abstractmethod
    def describe(self, source: Source, *options: MagicOption) -> str:
        """
        Describe the content of a file or buffer.

        Args:
            source: File path or in-memory bytes
            options: Option toggles for this query

        Returns:
            Human-readable description, e.g. "ASCII text"
        """
        pass

    @abstractmethod
    def mime(self, source: Source, *options: MagicOption) -> str:
        """
        Detect MIME type and encoding of a file or buffer.

        Args:
            source: File path or in-memory bytes
            options: Option toggles for this query

        Returns:
            MIME string, e.g. "text/plain; charset=us-ascii"
        """
        pass

    @abstractmethod
    def extensions(self, source: Source, *options: MagicOption) -> FrozenSet[str]:
        """
        List plausible file extensions for a file or buffer.

        Args:
            source: File path or in-memory bytes
            options: Option toggles for this query

        Returns:
            Set of extensions without leading dots, e.g. {"jpeg", "jpg"}
        """
        pass

    @abstractmethod
    def close(self):
        """Release every native resource held by this object."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False
