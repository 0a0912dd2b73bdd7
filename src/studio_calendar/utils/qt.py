from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Set

from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal

logger = logging.getLogger(__name__)


class JobSignals(QObject):
    succeeded = pyqtSignal(object)
    failed = pyqtSignal(Exception)


class _Job(QRunnable):
    def __init__(self, fn: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any], signals: JobSignals) -> None:
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = signals

    def run(self) -> None:
        try:
            result = self.fn(*self.args, **self.kwargs)
        except Exception as exc:  # noqa: BLE001 - handed to the UI thread
            self.signals.failed.emit(exc)
        else:
            self.signals.succeeded.emit(result)


class TaskRunner:
    """Runs blocking Supabase calls on the global thread pool.

    Callbacks are delivered through queued signals, so they always fire on the
    thread that created the runner (the UI thread).
    """

    def __init__(self, *, max_threads: Optional[int] = None) -> None:
        self.pool = QThreadPool.globalInstance()
        if max_threads is not None:
            self.pool.setMaxThreadCount(max_threads)
        self._in_flight: Set[JobSignals] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        **kwargs: Any,
    ) -> JobSignals:
        signals = JobSignals()
        self._in_flight.add(signals)

        def finished() -> None:
            self._in_flight.discard(signals)

        signals.succeeded.connect(lambda _result: finished())
        signals.failed.connect(lambda _exc: finished())
        if on_success:
            signals.succeeded.connect(on_success)
        if on_error:
            signals.failed.connect(on_error)
        else:
            signals.failed.connect(lambda exc: logger.error("Background job %s failed: %s", getattr(fn, "__name__", fn), exc))
        self.pool.start(_Job(fn, args, kwargs, signals))
        return signals
