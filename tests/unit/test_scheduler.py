"""Unit tests for debounced compile scheduling."""

import threading
import time

import pytest

from texpreview.contexts.rendering.diagnostics import CompileResult
from texpreview.contexts.rendering.scheduler import CompileScheduler

pytestmark = pytest.mark.unit


class Recorder:
    """Counts compile passes and collects published results."""

    def __init__(self, duration=0.0):
        self.duration = duration
        self.compiles = 0
        self.running = 0
        self.max_running = 0
        self.published = []
        self.published_event = threading.Event()
        self._lock = threading.Lock()

    def compile(self):
        with self._lock:
            self.compiles += 1
            self.running += 1
            self.max_running = max(self.max_running, self.running)
        time.sleep(self.duration)
        with self._lock:
            self.running -= 1
        return CompileResult(rendered_output=f"pass {self.compiles}", entry_file="main.tex")

    def publish(self, result):
        self.published.append(result)
        self.published_event.set()


def test_compile_runs_after_quiet_interval():
    recorder = Recorder()
    scheduler = CompileScheduler(recorder.compile, recorder.publish, quiet_interval_s=0.05)

    scheduler.notify_edit()
    assert scheduler.pending

    assert recorder.published_event.wait(timeout=2.0)
    assert recorder.compiles == 1
    assert not scheduler.pending


def test_burst_of_edits_compiles_once():
    recorder = Recorder()
    scheduler = CompileScheduler(recorder.compile, recorder.publish, quiet_interval_s=0.2)

    for _ in range(5):
        scheduler.notify_edit()
        time.sleep(0.01)

    assert recorder.published_event.wait(timeout=2.0)
    time.sleep(0.3)
    assert recorder.compiles == 1


def test_flush_runs_pending_compile_now():
    recorder = Recorder()
    scheduler = CompileScheduler(recorder.compile, recorder.publish, quiet_interval_s=10.0)

    scheduler.notify_edit()
    result = scheduler.flush()

    assert result.rendered_output == "pass 1"
    assert recorder.published == [result]
    assert not scheduler.pending


def test_flush_without_pending_compile():
    recorder = Recorder()
    scheduler = CompileScheduler(recorder.compile, recorder.publish)

    assert scheduler.flush() is None
    assert recorder.compiles == 0


def test_cancel_drops_pending_compile():
    recorder = Recorder()
    scheduler = CompileScheduler(recorder.compile, recorder.publish, quiet_interval_s=0.05)

    scheduler.notify_edit()
    scheduler.cancel()
    time.sleep(0.2)

    assert recorder.compiles == 0
    assert not scheduler.pending


def test_at_most_one_pass_in_flight():
    recorder = Recorder(duration=0.2)
    scheduler = CompileScheduler(recorder.compile, recorder.publish, quiet_interval_s=0.01)

    scheduler.notify_edit()
    time.sleep(0.05)
    # First pass is still running when the second quiet interval ends
    scheduler.notify_edit()

    deadline = time.time() + 3.0
    while len(recorder.published) < 2 and time.time() < deadline:
        time.sleep(0.02)

    assert recorder.compiles == 2
    assert recorder.max_running == 1
    assert [r.rendered_output for r in recorder.published] == ["pass 1", "pass 2"]
