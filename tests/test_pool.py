"""
Tests for MagicPool.
"""
import pytest
import queue
import threading
from concurrent.futures import ThreadPoolExecutor

from filemagic.base import MagicOption
from filemagic.config import reset_config
from filemagic.errors import DatabaseLoadFailed, SessionClosed
from filemagic.native import libmagic
from filemagic.native.libmagic import magic_t
from filemagic.session.pool import MagicPool


class CountingLibMagic:
    """Minimal stand-in that hands out numbered cookies."""

    name = 'counting'

    def __init__(self, fail_load_after=None):
        self.fail_load_after = fail_load_after
        self.opened = 0
        self.closed = 0
        self.registers = {}
        self.loaded = []

    def magic_open(self, flags):
        self.opened += 1
        return magic_t(self.opened)

    def magic_close(self, cookie):
        self.closed += 1

    def magic_load(self, cookie, path):
        self.loaded.append(path)
        if self.fail_load_after is not None and cookie.value > self.fail_load_after:
            return -1
        return 0

    def magic_setflags(self, cookie, flags):
        self.registers[cookie.value] = flags
        return 0

    def magic_buffer(self, cookie, buffer, length):
        return b"flags=%d" % self.registers[cookie.value]

    def magic_error(self, cookie):
        return b"load failed"

    def magic_errno(self, cookie):
        return 0


# ------------------------------------------------------------ construction

def test_pool_opens_requested_sessions():
    lib = CountingLibMagic()
    pool = MagicPool(size=3, library=lib)
    assert pool.size == 3
    assert lib.opened == 3
    pool.close()
    assert lib.closed == 3


def test_databases_with_default_size(monkeypatch):
    monkeypatch.setenv('MAGIC_POOL_SIZE', '3')
    reset_config()
    lib = CountingLibMagic()
    try:
        pool = MagicPool("/x.mgc", "/y.mgc", library=lib)
    finally:
        reset_config()
    assert pool.size == 3
    assert lib.loaded == [b"/x.mgc:/y.mgc"] * 3
    pool.close()


def test_pool_size_must_be_positive():
    with pytest.raises(ValueError):
        MagicPool(size=0, library=CountingLibMagic())


def test_partial_failure_closes_opened_sessions():
    lib = CountingLibMagic(fail_load_after=2)
    with pytest.raises(DatabaseLoadFailed):
        MagicPool(size=4, library=lib)
    # Two good sessions plus the one whose load failed
    assert lib.opened == 3
    assert lib.closed == 3


# ------------------------------------------------------------ queries

def test_pool_queries_use_their_own_flags():
    with MagicPool(size=2, library=CountingLibMagic()) as pool:
        assert pool.describe(b"x") == "flags=%d" % libmagic.MAGIC_NONE
        assert pool.mime(b"x", MagicOption.COMPRESS) == "flags=%d" % (
            libmagic.MAGIC_MIME | libmagic.MAGIC_COMPRESS)


def test_concurrent_callers_each_get_a_session():
    with MagicPool(size=4, library=CountingLibMagic()) as pool:
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: pool.mime(b"data"), range(64)))
    assert set(results) == {"flags=%d" % libmagic.MAGIC_MIME}


def test_borrowed_session_is_exclusive():
    with MagicPool(size=1, library=CountingLibMagic()) as pool:
        with pool.session():
            with pytest.raises(queue.Empty):
                with pool.session(timeout=0.05):
                    pass
        # Returned after the with-block
        with pool.session(timeout=0.05) as session:
            assert not session.closed


def test_closed_pool_rejects_queries():
    pool = MagicPool(size=1, library=CountingLibMagic())
    pool.close()
    pool.close()
    assert pool.closed
    with pytest.raises(SessionClosed):
        pool.describe(b"x")


# ------------------------------------------------------------ real libmagic

def test_real_pool_under_threads():
    barrier = threading.Barrier(4)

    def classify(pool, data, mime):
        barrier.wait()
        return pool.mime(data) if mime else pool.describe(data)

    with MagicPool(size=2) as pool:
        with ThreadPoolExecutor(max_workers=4) as executor:
            futures = [
                executor.submit(classify, pool, b"hello world\n", i % 2 == 0)
                for i in range(4)
            ]
            results = [f.result() for f in futures]

    for i, result in enumerate(results):
        if i % 2 == 0:
            assert result.startswith("text/plain")
        else:
            assert "/" not in result
