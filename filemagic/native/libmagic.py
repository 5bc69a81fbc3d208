"""
ctypes binding for the native libmagic library.

Holds the constant table mirrored from <magic.h> and the LibMagic class,
which declares the prototypes of every libmagic function this package
consumes.  No error checking happens here: return values are handed back
raw so the session layer can translate them in one place.
"""
import ctypes
import ctypes.util
import logging
import os
import threading
from typing import Dict, Optional

from filemagic.errors import LibraryNotFound

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_NAME = 'magic'

# --------------------------------------------------------------- flags

MAGIC_NONE = 0x0000000              # No flags
MAGIC_DEBUG = 0x0000001             # Turn on debugging
MAGIC_SYMLINK = 0x0000002           # Follow symlinks
MAGIC_COMPRESS = 0x0000004          # Check inside compressed files
MAGIC_DEVICES = 0x0000008           # Look at the contents of devices
MAGIC_MIME_TYPE = 0x0000010         # Return the MIME type
MAGIC_CONTINUE = 0x0000020          # Return all matches
MAGIC_CHECK = 0x0000040             # Print warnings to stderr
MAGIC_PRESERVE_ATIME = 0x0000080    # Restore access time on exit
MAGIC_RAW = 0x0000100               # Don't convert unprintable chars
MAGIC_ERROR = 0x0000200             # Handle ENOENT etc as real errors
MAGIC_MIME_ENCODING = 0x0000400     # Return the MIME encoding
MAGIC_MIME = MAGIC_MIME_TYPE | MAGIC_MIME_ENCODING
MAGIC_APPLE = 0x0000800             # Return the Apple creator/type
MAGIC_EXTENSION = 0x1000000         # Return a /-separated list of extensions
MAGIC_COMPRESS_TRANSP = 0x2000000   # Check inside compressed files but not report compression
MAGIC_NODESC = MAGIC_EXTENSION | MAGIC_MIME | MAGIC_APPLE

# --------------------------------------------------------------- params

MAGIC_PARAM_INDIR_MAX = 0
MAGIC_PARAM_NAME_MAX = 1
MAGIC_PARAM_ELF_PHNUM_MAX = 2
MAGIC_PARAM_ELF_SHNUM_MAX = 3
MAGIC_PARAM_ELF_NOTES_MAX = 4
MAGIC_PARAM_REGEX_MAX = 5
MAGIC_PARAM_BYTES_MAX = 6


class magic_t(ctypes.c_void_p):
    """Opaque cookie handle.  As a c_void_p subclass it is never auto-converted to int."""


class LibMagic:
    """Prototyped entry points of one loaded libmagic shared object."""

    def __init__(self, cdll: ctypes.CDLL, name: str = DEFAULT_LIBRARY_NAME):
        self.name = name
        self._cdll = cdll

        self.magic_open = self._declare('magic_open', magic_t, [ctypes.c_int])
        self.magic_close = self._declare('magic_close', None, [magic_t])
        self.magic_load = self._declare('magic_load', ctypes.c_int, [magic_t, ctypes.c_char_p])
        self.magic_setflags = self._declare('magic_setflags', ctypes.c_int, [magic_t, ctypes.c_int])
        self.magic_getflags = self._declare('magic_getflags', ctypes.c_int, [magic_t])
        self.magic_file = self._declare('magic_file', ctypes.c_char_p, [magic_t, ctypes.c_char_p])
        self.magic_buffer = self._declare(
            'magic_buffer', ctypes.c_char_p, [magic_t, ctypes.c_void_p, ctypes.c_size_t])
        self.magic_error = self._declare('magic_error', ctypes.c_char_p, [magic_t])
        self.magic_errno = self._declare('magic_errno', ctypes.c_int, [magic_t])
        # Missing from older releases; None when absent
        self.magic_version = self._declare_optional('magic_version', ctypes.c_int, [])
        self.magic_setparam = self._declare_optional(
            'magic_setparam', ctypes.c_int, [magic_t, ctypes.c_int, ctypes.POINTER(ctypes.c_size_t)])
        self.magic_getparam = self._declare_optional(
            'magic_getparam', ctypes.c_int, [magic_t, ctypes.c_int, ctypes.POINTER(ctypes.c_size_t)])

    def _declare(self, symbol: str, restype, argtypes):
        # Own function object; python-magic sets errcheck on the CDLL attributes
        return ctypes.CFUNCTYPE(restype, *argtypes)((symbol, self._cdll))

    def _declare_optional(self, symbol: str, restype, argtypes):
        if not hasattr(self._cdll, symbol):
            logger.debug("%s does not export %s", self.name, symbol)
            return None
        return self._declare(symbol, restype, argtypes)

    def __repr__(self) -> str:
        return f"LibMagic(name={self.name!r})"


# Loaded once per name for the lifetime of the process
_libraries: Dict[str, LibMagic] = {}
_libraries_lock = threading.Lock()


def _open_cdll(name: str) -> ctypes.CDLL:
    """Resolve *name* to a shared object and load it."""
    if os.sep in name or os.path.isfile(name):
        logger.debug("Loading libmagic from path %s", name)
        return ctypes.CDLL(name)

    found = ctypes.util.find_library(name)
    if found:
        logger.debug("Native magic library name %s resolved to %s", name, found)
        return ctypes.CDLL(found)

    if name == DEFAULT_LIBRARY_NAME:
        # Homebrew, MacPorts, Windows DLL names, musl
        try:
            from magic import loader
        except ImportError as e:
            raise LibraryNotFound(f"Cannot find native library '{name}': {e}") from e
        logger.debug("find_library missed %s, falling back to python-magic loader", name)
        try:
            return loader.load_lib()
        except ImportError as e:
            raise LibraryNotFound(f"Cannot find native library '{name}': {e}") from e

    raise LibraryNotFound(f"Cannot find native library '{name}'")


def load_library(name: Optional[str] = None) -> LibMagic:
    """
    Return the LibMagic binding for *name*, loading it on first use.

    Args:
        name: Library name (e.g. "magic") or path to the shared object.
              Defaults to the configured MAGIC_LIBRARY_NAME.

    Returns:
        Shared LibMagic instance for that name

    Raises:
        LibraryNotFound: If the shared object cannot be located or loaded
    """
    if not name or not name.strip():
        from filemagic.config import get_config
        name = get_config().library_name

    with _libraries_lock:
        library = _libraries.get(name)
        if library is None:
            try:
                cdll = _open_cdll(name)
            except OSError as e:
                logger.warning("Failed to load native magic library %s: %s", name, e)
                raise LibraryNotFound(f"Cannot load native library '{name}': {e}") from e
            library = LibMagic(cdll, name)
            _libraries[name] = library
        return library


def unload_libraries():
    """Forget every cached binding (useful for testing)."""
    with _libraries_lock:
        _libraries.clear()
