"""Tests for the reference-counted OCR worker pool."""

import threading
import time

import pytest

from label_extraction.ocr_engine import OCRWorkerPool
from label_extraction.utils.exceptions import OCREngineNotAvailableError

from conftest import EngineFactory


def wait_until(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestLeaseCounting:

    def test_engine_built_lazily(self):
        factory = EngineFactory()
        pool = OCRWorkerPool(engine_factory=factory, idle_timeout=10)

        assert not pool.is_active
        assert factory.created == []

        engine = pool.acquire()

        assert pool.is_active
        assert factory.created == [engine]
        assert pool.ref_count == 1
        pool.shutdown()

    def test_nested_acquires_share_one_engine(self):
        factory = EngineFactory()
        pool = OCRWorkerPool(engine_factory=factory, idle_timeout=10)

        first = pool.acquire()
        second = pool.acquire()

        assert first is second
        assert pool.ref_count == 2
        assert len(factory.created) == 1
        pool.shutdown()

    def test_lease_context_releases_on_error(self):
        pool = OCRWorkerPool(engine_factory=EngineFactory(), idle_timeout=10)

        with pytest.raises(RuntimeError):
            with pool.lease():
                assert pool.ref_count == 1
                raise RuntimeError("boom")

        assert pool.ref_count == 0
        pool.shutdown()

    def test_over_release_is_ignored(self):
        pool = OCRWorkerPool(engine_factory=EngineFactory(), idle_timeout=10)

        pool.release()

        assert pool.ref_count == 0
        assert not pool.is_active

    def test_factory_failure_leaves_no_lease(self):
        def broken_factory():
            raise OCREngineNotAvailableError("tesseract")

        pool = OCRWorkerPool(engine_factory=broken_factory, idle_timeout=10)

        with pytest.raises(OCREngineNotAvailableError):
            pool.acquire()

        assert pool.ref_count == 0
        assert not pool.is_active


class TestIdleTeardown:

    def test_engine_survives_until_timeout(self):
        factory = EngineFactory()
        pool = OCRWorkerPool(engine_factory=factory, idle_timeout=0.3)

        pool.acquire()
        pool.release()

        assert pool.is_active
        assert wait_until(lambda: not pool.is_active)
        assert factory.created[0].terminate_calls == 1

    def test_reacquire_cancels_pending_teardown(self):
        factory = EngineFactory()
        pool = OCRWorkerPool(engine_factory=factory, idle_timeout=0.2)

        pool.acquire()
        pool.release()
        pool.acquire()
        time.sleep(0.4)

        assert pool.is_active
        assert factory.created[0].terminate_calls == 0
        pool.shutdown()
        assert factory.created[0].terminate_calls == 1

    def test_engine_not_destroyed_while_leased(self):
        factory = EngineFactory()
        pool = OCRWorkerPool(engine_factory=factory, idle_timeout=0.05)

        pool.acquire()
        time.sleep(0.2)

        assert pool.is_active
        pool.shutdown()

    def test_concurrent_acquires_destroy_exactly_once(self):
        factory = EngineFactory()
        pool = OCRWorkerPool(engine_factory=factory, idle_timeout=0.1)
        barrier = threading.Barrier(2)
        engines = []

        def worker():
            barrier.wait()
            engines.append(pool.acquire())

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert pool.ref_count == 2
        assert engines[0] is engines[1]

        pool.release()
        pool.release()

        assert wait_until(lambda: not pool.is_active)
        time.sleep(0.2)

        assert len(factory.created) == 1
        assert factory.created[0].terminate_calls == 1

    def test_new_engine_after_teardown(self):
        factory = EngineFactory()
        pool = OCRWorkerPool(engine_factory=factory, idle_timeout=0.05)

        pool.acquire()
        pool.release()
        assert wait_until(lambda: not pool.is_active)

        engine = pool.acquire()

        assert len(factory.created) == 2
        assert engine is factory.created[1]
        pool.shutdown()
