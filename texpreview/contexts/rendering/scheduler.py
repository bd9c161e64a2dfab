"""
Debounced compile scheduling.

Edits arrive in bursts while someone types. The scheduler waits for a quiet
interval after the last edit before compiling, runs at most one pass at a
time, and publishes a result only once its pass has completed.
"""

import threading
from typing import Callable, Optional

from texpreview.contexts.rendering.diagnostics import CompileResult
from texpreview.contexts.rendering.logger import _log_debug, _log_error


class CompileScheduler:
    """
    Debounce edits into compile passes.

    Args:
        compile_fn: Runs one compile pass over the current snapshot
        publish: Receives each completed result
        quiet_interval_s: Seconds without edits before a pass starts

    Example:
        scheduler = CompileScheduler(lambda: compile_project(root), show, quiet_interval_s=1.0)
        scheduler.notify_edit()   # starts the quiet interval
        scheduler.notify_edit()   # restarts it; only one pass will run
    """

    def __init__(
        self,
        compile_fn: Callable[[], CompileResult],
        publish: Callable[[CompileResult], None],
        quiet_interval_s: float = 1.0,
    ):
        self.compile_fn = compile_fn
        self.publish = publish
        self.quiet_interval_s = quiet_interval_s

        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        """Whether a compile is waiting for its quiet interval to pass."""
        with self._lock:
            return self._timer is not None

    def notify_edit(self) -> None:
        """Record an edit, restarting the quiet interval."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                _log_debug("Edit during quiet interval, pending compile restarted")
            self._generation += 1
            self._timer = threading.Timer(self.quiet_interval_s, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop the pending compile, if any."""
        with self._lock:
            self._drop_pending()

    def flush(self) -> Optional[CompileResult]:
        """
        Run the pending compile now instead of waiting.

        Returns:
            The published result, or None when nothing was pending
        """
        with self._lock:
            if self._timer is None:
                return None
            self._drop_pending()
        return self._run()

    def _drop_pending(self) -> None:
        # Caller holds self._lock
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            # Superseded by a later edit, flush or cancel
            if generation != self._generation:
                return
            self._timer = None

        try:
            self._run()
        except Exception as e:
            _log_error(f"Scheduled compile failed: {e}")

    def _run(self) -> CompileResult:
        with self._run_lock:
            result = self.compile_fn()
            self.publish(result)
        return result
