import threading
from typing import Callable, Optional

import httpx

from launchpad.core import stages
from launchpad.observability.logging import log
from launchpad.settings import settings

ConnectivityCallback = Callable[[str], None]


class ConnectivityMonitor:
    def start(self, callback: ConnectivityCallback) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError


class ProbeConnectivityMonitor(ConnectivityMonitor):
    """
    Polls a probe URL and reports edges only: 'lost' when a reachable network
    stops answering, 'restored' when it answers again. The first probe assumes
    the network was up, so an offline start reports 'lost' once.
    """

    def __init__(self, url: Optional[str] = None, interval_sec: Optional[float] = None, timeout: float = 3.0):
        self.url = url if url is not None else settings.CONNECTIVITY_PROBE_URL
        self.interval_sec = float(interval_sec if interval_sec is not None else settings.CONNECTIVITY_POLL_SEC)
        self.timeout = timeout
        self._online = True
        self._callback: Optional[ConnectivityCallback] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def probe(self) -> bool:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.head(self.url)
            return resp.status_code < 500
        except httpx.HTTPError:
            return False

    def check_once(self) -> None:
        online = self.probe()
        if online == self._online:
            return
        self._online = online
        status = stages.CONNECTIVITY_RESTORED if online else stages.CONNECTIVITY_LOST
        log(event="connectivity_changed", status=status)
        if self._callback is not None:
            self._callback(status)

    def _run(self) -> None:
        while not self._stop.is_set():
            self.check_once()
            self._stop.wait(self.interval_sec)

    def start(self, callback: ConnectivityCallback) -> None:
        self._callback = callback
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="connectivity-probe", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._callback = None
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.timeout + 1.0)
        self._thread = None
