"""
Serialized control context for the launch director.

All director state is mutated from tasks run by a dispatcher. Blocking work
(HTTP calls, OS permission prompts) runs elsewhere and its result is posted
back as a task, so two tasks never touch director state at the same time.
"""
from __future__ import annotations

import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional

from launchpad.observability.logging import log

DoneCallback = Callable[[Any, Optional[BaseException]], None]


class TimerHandle:
    def __init__(self):
        self.cancelled = False
        self._timer: Optional[threading.Timer] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self._timer is not None:
            self._timer.cancel()


class Dispatcher:
    def submit(self, fn: Callable, *args) -> None:
        raise NotImplementedError

    def call_later(self, delay_sec: float, fn: Callable, *args) -> TimerHandle:
        raise NotImplementedError

    def run_in_background(self, fn: Callable[[], Any], on_done: DoneCallback) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        pass


def _run_task(fn: Callable, args) -> None:
    try:
        fn(*args)
    except Exception as e:
        # A failing task must not kill the control loop
        log(event="dispatch_task_exception", task=getattr(fn, "__name__", repr(fn)), errorType=type(e).__name__, error=str(e)[:300])


class SerialDispatcher(Dispatcher):
    """One worker thread drains the task queue; a small pool runs blocking calls."""

    _STOP = object()

    def __init__(self, max_background_workers: int = 4):
        self._tasks: "queue.Queue" = queue.Queue()
        self._pool = ThreadPoolExecutor(max_workers=max_background_workers, thread_name_prefix="launch-io")
        self._timers: List[TimerHandle] = []
        self._lock = threading.Lock()
        self._stopped = False
        self._thread = threading.Thread(target=self._loop, name="launch-director", daemon=True)
        self._thread.start()

    def _loop(self) -> None:
        while True:
            item = self._tasks.get()
            if item is self._STOP:
                return
            fn, args = item
            _run_task(fn, args)

    def submit(self, fn: Callable, *args) -> None:
        if self._stopped:
            return
        self._tasks.put((fn, args))

    def call_later(self, delay_sec: float, fn: Callable, *args) -> TimerHandle:
        handle = TimerHandle()

        def _fire():
            if not handle.cancelled:
                self.submit(self._guarded, handle, fn, args)

        t = threading.Timer(max(0.0, float(delay_sec)), _fire)
        t.daemon = True
        handle._timer = t
        with self._lock:
            self._timers = [h for h in self._timers if not h.cancelled]
            self._timers.append(handle)
        t.start()
        return handle

    @staticmethod
    def _guarded(handle: TimerHandle, fn: Callable, args) -> None:
        # Cancelled between firing and running on the control thread
        if not handle.cancelled:
            fn(*args)

    def run_in_background(self, fn: Callable[[], Any], on_done: DoneCallback) -> None:
        if self._stopped:
            return

        def _work():
            try:
                result = fn()
            except Exception as e:
                self.submit(on_done, None, e)
                return
            self.submit(on_done, result, None)

        self._pool.submit(_work)

    def join_idle(self, timeout: float = 5.0) -> bool:
        """Blocks until every task queued so far has run. Returns False on timeout."""
        done = threading.Event()
        self.submit(done.set)
        return done.wait(timeout)

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        with self._lock:
            for h in self._timers:
                h.cancel()
            self._timers = []
        self._tasks.put(self._STOP)
        self._pool.shutdown(wait=False)
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=5.0)
