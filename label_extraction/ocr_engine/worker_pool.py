"""
OCR Worker Pool Module.

Engine construction costs seconds, so one engine instance is shared by every
extraction call in the process. The pool creates it on the first acquire,
counts outstanding leases, and tears it down only after the count has been
zero for a whole idle period.

States:
    absent  -- no engine instance
    active  -- engine instance exists, refcount >= 0

Usage:
    pool = OCRWorkerPool()
    with pool.lease() as engine:
        text = engine.recognize(png_bytes)
"""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from config import get_config
from label_extraction.utils.logger import get_logger

logger = get_logger(__name__)


def _default_engine_factory():
    from .tesseract_backend import TesseractBackend
    return TesseractBackend()


class OCRWorkerPool:
    """
    Reference-counted holder for a single OCR engine.

    The engine is any object exposing ``recognize(image)`` and
    ``terminate()``. All refcount and timer bookkeeping happens under one
    lock; engine construction also runs under it so concurrent first
    acquisitions build exactly one engine.

    Attributes:
        idle_timeout: Seconds the refcount must stay at zero before the
            engine is destroyed.

    Example:
        >>> pool = OCRWorkerPool(engine_factory=FakeEngine, idle_timeout=0.1)
        >>> engine = pool.acquire()
        >>> pool.release()
        >>> pool.is_active
        True
    """

    def __init__(
        self,
        engine_factory: Optional[Callable[[], Any]] = None,
        idle_timeout: Optional[float] = None
    ) -> None:
        self.engine_factory = engine_factory or _default_engine_factory
        self.idle_timeout = (
            idle_timeout if idle_timeout is not None
            else get_config("ocr.pool.idle_timeout", 30)
        )

        self._lock = threading.Lock()
        self._engine = None
        self._ref_count = 0
        self._timer: Optional[threading.Timer] = None
        # Bumped on every acquire so a timer that already fired but is
        # waiting on the lock can tell it has been superseded.
        self._generation = 0

    @property
    def is_active(self) -> bool:
        with self._lock:
            return self._engine is not None

    @property
    def ref_count(self) -> int:
        with self._lock:
            return self._ref_count

    def acquire(self):
        """
        Take a lease on the shared engine, constructing it if absent.

        Returns:
            The engine instance.

        Raises:
            OCREngineNotAvailableError: If the engine cannot be constructed.
        """
        with self._lock:
            self._cancel_timer()
            self._generation += 1

            if self._engine is None:
                logger.info("Starting OCR engine")
                self._engine = self.engine_factory()

            self._ref_count += 1
            logger.debug(f"OCR engine acquired (refs={self._ref_count})")
            return self._engine

    def release(self) -> None:
        """
        Return a lease. At zero outstanding leases the idle timer (re)starts.
        """
        with self._lock:
            if self._ref_count == 0:
                logger.warning("OCR engine released more times than acquired")
                return

            self._ref_count -= 1
            logger.debug(f"OCR engine released (refs={self._ref_count})")

            if self._ref_count == 0 and self._engine is not None:
                self._start_timer()

    @contextmanager
    def lease(self) -> Iterator[Any]:
        """Acquire the engine for the duration of a ``with`` block."""
        engine = self.acquire()
        try:
            yield engine
        finally:
            self.release()

    def shutdown(self) -> None:
        """Destroy the engine now, regardless of outstanding leases."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1
            self._ref_count = 0
            self._destroy_engine()

    def _start_timer(self) -> None:
        self._cancel_timer()
        generation = self._generation
        self._timer = threading.Timer(self.idle_timeout, self._on_idle, args=(generation,))
        self._timer.daemon = True
        self._timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_idle(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._ref_count != 0:
                return
            self._timer = None
            logger.info(f"OCR engine idle for {self.idle_timeout}s, terminating")
            self._destroy_engine()

    def _destroy_engine(self) -> None:
        engine, self._engine = self._engine, None
        if engine is None:
            return
        try:
            engine.terminate()
        except Exception as e:
            logger.error(f"Error terminating OCR engine: {e}")


_shared_pool: Optional[OCRWorkerPool] = None
_shared_lock = threading.Lock()


def get_shared_pool() -> OCRWorkerPool:
    """
    Get the process-wide default pool.

    Components accept an injected pool; this one is used when none is given.
    """
    global _shared_pool
    with _shared_lock:
        if _shared_pool is None:
            _shared_pool = OCRWorkerPool()
        return _shared_pool
