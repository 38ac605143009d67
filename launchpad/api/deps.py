import threading
from typing import Optional

from launchpad.core.collaborators import StaticAttributionSource
from launchpad.core.director import LaunchDirector
from launchpad.observability.logging import log
from launchpad.remote.config_client import HttpConfigService
from launchpad.remote.connectivity import ProbeConnectivityMonitor
from launchpad.remote.organic import HttpOrganicValidator
from launchpad.settings import settings
from launchpad.store.kv import build_store
from launchpad.store.launch_state import LaunchStore

_lock = threading.Lock()
_director: Optional[LaunchDirector] = None
attribution_source = StaticAttributionSource()


def build_director() -> LaunchDirector:
    return LaunchDirector(
        LaunchStore(build_store()),
        attribution_source=attribution_source,
        config_service=HttpConfigService(),
        organic_validator=HttpOrganicValidator(),
        connectivity=ProbeConnectivityMonitor() if settings.CONNECTIVITY_ENABLED else None,
    )


def get_director() -> LaunchDirector:
    """One director per process launch."""
    global _director
    with _lock:
        if _director is None:
            _director = build_director()
            _director.start()
        return _director


def shutdown_director() -> None:
    global _director
    with _lock:
        if _director is not None:
            _director.close()
            _director = None
            log(event="launch_director_discarded")


def settle(director: LaunchDirector, timeout: float = 2.0) -> None:
    """Waits for already-posted events to run so responses reflect them."""
    join_idle = getattr(director.dispatcher, "join_idle", None)
    if callable(join_idle):
        join_idle(timeout)
