from collections import deque
from typing import List

import pytest

from launchpad.core.collaborators import StaticAttributionSource, StaticPermissionRequester
from launchpad.core.director import LaunchDirector
from launchpad.core.dispatch import Dispatcher, TimerHandle
from launchpad.core.errors import OrganicValidationError, RemoteConfigError
from launchpad.remote.config_client import ConfigService
from launchpad.remote.connectivity import ConnectivityMonitor
from launchpad.remote.organic import OrganicValidator
from launchpad.remote.payloads import ConfigResult
from launchpad.store.kv import MemoryKeyValueStore
from launchpad.store.launch_state import LaunchStore


class FakeConfigService(ConfigService):
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []

    def fetch(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise RemoteConfigError("no_result")
        return self.result


class FakeOrganicValidator(OrganicValidator):
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {}
        self.error = error
        self.calls = []

    def validate(self, device_id):
        self.calls.append(device_id)
        if self.error is not None:
            raise self.error
        if not device_id:
            raise OrganicValidationError("missing_device_id")
        return self.result


class FakeConnectivity(ConnectivityMonitor):
    def __init__(self):
        self.callback = None
        self.stopped = False

    def start(self, callback):
        self.callback = callback

    def stop(self):
        self.stopped = True
        self.callback = None


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


class InlineDispatcher(Dispatcher):
    """
    Deterministic dispatcher: tasks run on the caller's thread in FIFO order,
    background work runs synchronously, and timers wait for advance().
    """

    def __init__(self):
        self._queue: deque = deque()
        self._draining = False
        self.now = 0.0
        self._timers: List[tuple] = []  # (due, seq, handle, fn, args)
        self._seq = 0
        self.errors: List[BaseException] = []

    def submit(self, fn, *args):
        self._queue.append((fn, args))
        if self._draining:
            return
        self._draining = True
        try:
            while self._queue:
                f, a = self._queue.popleft()
                try:
                    f(*a)
                except Exception as e:
                    self.errors.append(e)
        finally:
            self._draining = False

    def call_later(self, delay_sec, fn, *args) -> TimerHandle:
        handle = TimerHandle()
        self._seq += 1
        self._timers.append((self.now + max(0.0, float(delay_sec)), self._seq, handle, fn, args))
        return handle

    def pending_timers(self) -> int:
        return sum(1 for t in self._timers if not t[2].cancelled)

    def advance(self, seconds: float):
        """Moves the clock forward and fires every timer that became due, in order."""
        target = self.now + float(seconds)
        while True:
            due = sorted((t for t in self._timers if t[0] <= target), key=lambda t: (t[0], t[1]))
            if not due:
                break
            t = due[0]
            self._timers.remove(t)
            self.now = max(self.now, t[0])
            handle, fn, args = t[2], t[3], t[4]
            if not handle.cancelled:
                self.submit(fn, *args)
        self.now = target

    def run_in_background(self, fn, on_done):
        try:
            result = fn()
        except Exception as e:
            self.submit(on_done, None, e)
            return
        self.submit(on_done, result, None)


class Harness:
    """Director wired to in-memory fakes and a deterministic dispatcher."""

    def __init__(self, **overrides):
        self.kv = MemoryKeyValueStore()
        self.store = LaunchStore(self.kv)
        self.dispatcher = InlineDispatcher()
        self.config = FakeConfigService(result=ConfigResult(url="https://w", expires=999.0))
        self.organic = FakeOrganicValidator()
        self.source = StaticAttributionSource("dev-123")
        self.connectivity = FakeConnectivity()
        self.permissions = StaticPermissionRequester(True)
        self.clock = FakeClock()
        self.states = []
        self._overrides = overrides
        self._director = None

    @property
    def director(self) -> LaunchDirector:
        if self._director is None:
            kwargs = dict(
                attribution_source=self.source,
                config_service=self.config,
                organic_validator=self.organic,
                permission_requester=self.permissions,
                connectivity=self.connectivity,
                push_token_provider=lambda: "tok-1",
                dispatcher=self.dispatcher,
                clock=self.clock,
                organic_delay_sec=5.0,
                merge_timer_sec=5.0,
                attribution_timeout_sec=30.0,
                push_ask_cooldown_sec=3 * 24 * 3600,
            )
            kwargs.update(self._overrides)
            self._director = LaunchDirector(self.store, **kwargs)
            self._director.add_listener(self.states.append)
            self._director.start()
        return self._director

    def relaunch(self) -> "Harness":
        """A fresh process launch over the same persisted store."""
        nxt = Harness(**self._overrides)
        nxt.kv = self.kv
        nxt.store = self.store
        nxt.config = self.config
        return nxt

    def resolved_push(self):
        """Push permission already answered so evaluation goes straight to remote config."""
        self.store.accepted_notifications = True


@pytest.fixture
def harness():
    return Harness()
