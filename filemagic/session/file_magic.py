"""
Session handle around one libmagic cookie.

FileMagic opens a cookie, loads a magic database into it and answers
description, MIME and extension queries for paths and in-memory buffers.
The cookie's flag register is rewritten before every query, so a session
runs one query at a time; use MagicPool for concurrent callers.
"""
import ctypes
import logging
import os
import threading
from typing import FrozenSet, Iterable, Optional, Union

from filemagic.base import AbstractMagic, MagicOption, MagicParam, QueryMode, Source
from filemagic.errors import (
    DatabaseLoadFailed,
    EngineUnavailable,
    InvalidInput,
    MagicError,
    ParameterRejected,
    QueryFailed,
    SessionClosed,
)
from filemagic.extensions import parse_extensions
from filemagic.flags import combine_flags
from filemagic.native.libmagic import MAGIC_NONE, LibMagic, load_library

logger = logging.getLogger(__name__)

BUFFER_TYPES = (bytes, bytearray, memoryview)


class FileMagic(AbstractMagic):
    """Owns exactly one libmagic cookie."""

    DATABASE_SEPARATOR = ':'

    def __init__(self, *database_paths: Optional[Union[str, os.PathLike]],
                 library: Optional[Union[str, LibMagic]] = None):
        """
        Open a cookie and load the magic database into it.

        Args:
            database_paths: Database files to load; blank entries are
                            ignored and none at all means libmagic's default
            library: Native library name or path, or an already loaded
                     LibMagic; defaults to MAGIC_LIBRARY_NAME

        Raises:
            LibraryNotFound: If the native library cannot be loaded
            EngineUnavailable: If libmagic cannot allocate a cookie
            DatabaseLoadFailed: If the database cannot be loaded
        """
        if library is None or isinstance(library, str):
            library = load_library(library)
        self._lib = library
        self._lock = threading.Lock()
        self._cookie = None

        databases = self._combine_paths(database_paths)

        self._cookie = self._check(
            self._lib.magic_open(MAGIC_NONE), EngineUnavailable, "Cannot allocate magic cookie")

        try:
            self._check(self._lib.magic_load(self._cookie, databases), DatabaseLoadFailed)
        except BaseException as e:
            if isinstance(e, DatabaseLoadFailed):
                logger.warning("Failed to load magic database %s: %s", databases or '(default)', e)
            self._lib.magic_close(self._cookie)
            self._cookie = None
            raise

        logger.debug("Opened magic cookie with database %s", databases or '(default)')

    # ------------------------------------------------------------ lifecycle

    @property
    def closed(self) -> bool:
        return self._cookie is None

    def close(self):
        """Release the cookie.  Closing twice is harmless."""
        with self._lock:
            if self._cookie is None:
                return
            self._lib.magic_close(self._cookie)
            self._cookie = None
        logger.debug("Closed magic cookie")

    def _ensure_open(self):
        if self._cookie is None:
            raise SessionClosed("Magic session is closed")

    # -------------------------------------------------------------- queries

    def describe(self, source: Source, *options: MagicOption) -> str:
        return self._query(source, QueryMode.DESCRIPTION, options)

    def mime(self, source: Source, *options: MagicOption) -> str:
        return self._query(source, QueryMode.MIME, options)

    def extensions(self, source: Source, *options: MagicOption) -> FrozenSet[str]:
        return parse_extensions(self._query(source, QueryMode.EXTENSION, options))

    def _query(self, source: Source, mode: QueryMode, options: Iterable[Optional[MagicOption]]) -> str:
        """
        Set the flags for *mode* and run a path or buffer query.

        The flag register is overwritten, never merged, so nothing from an
        earlier query carries over.
        """
        self._ensure_open()

        if isinstance(source, BUFFER_TYPES):
            buffer, length = self._as_buffer(source)
            path = None
        else:
            buffer = None
            path = self._check_file_exists(source)

        flags = combine_flags(mode, options)

        with self._lock:
            self._ensure_open()
            self._check(self._lib.magic_setflags(self._cookie, flags), QueryFailed,
                        f"Unsupported flags 0x{flags:07x}")
            if path is not None:
                result = self._lib.magic_file(self._cookie, path)
            else:
                result = self._lib.magic_buffer(self._cookie, buffer, length)
            result = self._check(result, QueryFailed)

        return self._decode(result)

    @staticmethod
    def _as_buffer(source):
        """
        Return a pointer-compatible view of *source* and its length in bytes.

        bytes are passed as-is and writable buffers are wrapped in place;
        only read-only or non-contiguous views are copied.
        """
        if isinstance(source, bytes):
            return source, len(source)
        view = memoryview(source)
        length = view.nbytes
        if not view.readonly and view.c_contiguous:
            return (ctypes.c_char * length).from_buffer(view), length
        return view.tobytes(), length

    @staticmethod
    def _check_file_exists(file) -> bytes:
        path = os.fspath(file) if file is not None else ''
        text = os.fsdecode(path)
        if not text.strip() or not os.path.exists(text):
            raise InvalidInput(f"No such file or directory: {text}")
        return os.fsencode(path)

    # --------------------------------------------------------- engine state

    @property
    def flags(self) -> int:
        """Current value of the cookie's flag register."""
        with self._lock:
            self._ensure_open()
            return self._lib.magic_getflags(self._cookie)

    @property
    def version(self) -> int:
        """libmagic version number, e.g. 545 for 5.45."""
        if self._lib.magic_version is None:
            raise NotImplementedError("magic_version not implemented")
        return self._lib.magic_version()

    def get_param(self, param: MagicParam) -> int:
        """
        Read one of the engine's tunable limits.

        Raises:
            ParameterRejected: If libmagic does not support the parameter
        """
        if self._lib.magic_getparam is None:
            raise NotImplementedError("magic_getparam not implemented")
        value = ctypes.c_size_t()
        with self._lock:
            self._ensure_open()
            self._check(self._lib.magic_getparam(self._cookie, param.value, ctypes.byref(value)),
                        ParameterRejected, f"Cannot read parameter {param.name}")
        return value.value

    def set_param(self, param: MagicParam, value: int):
        """
        Change one of the engine's tunable limits for this session.

        Raises:
            ParameterRejected: If libmagic refuses the parameter or value
        """
        if self._lib.magic_setparam is None:
            raise NotImplementedError("magic_setparam not implemented")
        with self._lock:
            self._ensure_open()
            self._check(
                self._lib.magic_setparam(self._cookie, param.value, ctypes.byref(ctypes.c_size_t(value))),
                ParameterRejected, f"Cannot set parameter {param.name} to {value}")

    # -------------------------------------------------------------- helpers

    def _combine_paths(self, database_paths) -> Optional[bytes]:
        paths = [os.fspath(path) for path in database_paths or () if path is not None]
        paths = [os.fsdecode(path) for path in paths if os.fsdecode(path).strip()]
        if not paths:
            return None
        return os.fsencode(self.DATABASE_SEPARATOR.join(paths))

    def _check(self, result, error_cls=QueryFailed, message: Optional[str] = None):
        """
        Pass *result* through, or raise *error_cls* if it signals failure.

        A None result, a NULL cookie pointer or a non-zero status code is a
        failure.  The error message is *message* when given, otherwise
        libmagic's last error for this cookie.
        """
        failed = (
            result is None
            or (isinstance(result, ctypes.c_void_p) and not result.value)
            or (isinstance(result, int) and result != 0)
        )
        if not failed:
            return result
        raise self._error(error_cls, message)

    def _error(self, error_cls, message: Optional[str] = None) -> MagicError:
        errno = None
        if self._cookie is not None:
            if message is None:
                raw = self._lib.magic_error(self._cookie)
                message = self._decode(raw) if raw is not None else None
            errno = self._lib.magic_errno(self._cookie)
        logger.debug("libmagic call failed (%s): %s", error_cls.__name__, message)
        return error_cls(message, errno)

    @staticmethod
    def _decode(raw: bytes) -> str:
        # libmagic may echo metadata in the file's own charset
        return raw.decode('utf-8', 'backslashreplace')

    def __repr__(self) -> str:
        state = 'closed' if self.closed else 'open'
        return f"FileMagic(library={self._lib!r}, {state})"
