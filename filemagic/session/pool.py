"""
Pool of independently opened magic sessions.

A FileMagic answers one query at a time because the flag register lives in
its cookie.  MagicPool keeps several cookies open and lends each to one
caller at a time, so threads can classify files in parallel without
sharing a register.
"""
import logging
import queue
import threading
from contextlib import contextmanager
from typing import FrozenSet, Iterator, List, Optional

from filemagic.base import AbstractMagic, MagicOption, Source
from filemagic.config import get_config
from filemagic.errors import SessionClosed
from filemagic.session.file_magic import FileMagic

logger = logging.getLogger(__name__)


class MagicPool(AbstractMagic):
    """Fixed-size set of FileMagic sessions shared between threads."""

    def __init__(self, *database_paths, size: Optional[int] = None, library=None):
        """
        Open *size* sessions up front.

        Args:
            database_paths: Database files loaded into every session
            size: Number of sessions; defaults to MAGIC_POOL_SIZE
            library: Native library name/path or LibMagic, as for FileMagic

        Raises:
            ValueError: If size is less than 1
            MagicError: If any session fails to open; sessions opened
                        before the failure are closed again
        """
        size = size if size is not None else get_config().pool_size
        if size < 1:
            raise ValueError(f"Pool size must be at least 1, got {size}")

        self._sessions: List[FileMagic] = []
        self._idle: "queue.Queue[FileMagic]" = queue.Queue()
        self._closed = False
        self._close_lock = threading.Lock()

        try:
            for _ in range(size):
                session = FileMagic(*database_paths, library=library)
                self._sessions.append(session)
                self._idle.put(session)
        except Exception:
            for session in self._sessions:
                session.close()
            raise

        logger.debug("Opened magic pool with %d sessions", size)

    @property
    def size(self) -> int:
        return len(self._sessions)

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def session(self, timeout: Optional[float] = None) -> Iterator[FileMagic]:
        """
        Borrow a session for the duration of the with-block.

        Args:
            timeout: Seconds to wait for an idle session; None waits forever

        Raises:
            SessionClosed: If the pool is closed
            queue.Empty: If no session became idle within *timeout*
        """
        if self._closed:
            raise SessionClosed("Magic pool is closed")

        session = self._idle.get(timeout=timeout)
        try:
            yield session
        finally:
            self._idle.put(session)

    def describe(self, source: Source, *options: MagicOption) -> str:
        with self.session() as session:
            return session.describe(source, *options)

    def mime(self, source: Source, *options: MagicOption) -> str:
        with self.session() as session:
            return session.mime(source, *options)

    def extensions(self, source: Source, *options: MagicOption) -> FrozenSet[str]:
        with self.session() as session:
            return session.extensions(source, *options)

    def close(self):
        """Close every session.  Borrowed sessions are closed too."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        for session in self._sessions:
            session.close()
        logger.debug("Closed magic pool")

    def __repr__(self) -> str:
        return f"MagicPool(size={self.size}, closed={self._closed})"
