import time
from typing import Optional

from launchpad.core import stages
from launchpad.observability.logging import log
from launchpad.store.kv import KeyValueStore
from launchpad.store.models import LaunchSnapshot

K_HAS_RUN = "has_ever_run_before"
K_APP_MODE = "app_mode"
K_SAVED_URL = "saved_destination"
K_SAVED_EXPIRY = "saved_expiry"
K_ACCEPTED_PUSH = "accepted_notifications"
K_DECLINED_PUSH = "declined_notifications_permanently"
K_LAST_ASK = "last_notification_ask_ts"
K_TEMP_URL = "temp_destination"

ALL_KEYS = (
    K_HAS_RUN,
    K_APP_MODE,
    K_SAVED_URL,
    K_SAVED_EXPIRY,
    K_ACCEPTED_PUSH,
    K_DECLINED_PUSH,
    K_LAST_ASK,
    K_TEMP_URL,
)


def _encode_bool(v: bool) -> str:
    return "1" if v else "0"


def _decode_bool(raw: Optional[str]) -> Optional[bool]:
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes")


def _decode_float(raw: Optional[str]) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        return None


class LaunchStore:
    """
    Typed accessors over a KeyValueStore.

    The director is the only writer. Reads never raise on garbage values;
    an unparsable entry reads as absent.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    # --- run / mode ---
    @property
    def has_ever_run_before(self) -> bool:
        return bool(_decode_bool(self.kv.get(K_HAS_RUN)))

    @has_ever_run_before.setter
    def has_ever_run_before(self, value: bool) -> None:
        self.kv.set(K_HAS_RUN, _encode_bool(value))

    @property
    def app_mode(self) -> Optional[str]:
        raw = self.kv.get(K_APP_MODE)
        return raw if raw in stages.ALL_MODES else None

    @app_mode.setter
    def app_mode(self, value: str) -> None:
        if value not in stages.ALL_MODES:
            raise ValueError(f"Unknown app mode: {value!r}")
        self.kv.set(K_APP_MODE, value)

    # --- saved destination ---
    @property
    def saved_destination(self) -> Optional[str]:
        return self.kv.get(K_SAVED_URL) or None

    @property
    def saved_expiry(self) -> Optional[float]:
        return _decode_float(self.kv.get(K_SAVED_EXPIRY))

    def save_destination(self, url: str, expires: float) -> None:
        self.kv.set(K_SAVED_URL, url)
        self.kv.set(K_SAVED_EXPIRY, repr(float(expires)))

    # --- notifications ---
    @property
    def accepted_notifications(self) -> Optional[bool]:
        return _decode_bool(self.kv.get(K_ACCEPTED_PUSH))

    @accepted_notifications.setter
    def accepted_notifications(self, value: bool) -> None:
        self.kv.set(K_ACCEPTED_PUSH, _encode_bool(value))

    @property
    def declined_notifications_permanently(self) -> Optional[bool]:
        return _decode_bool(self.kv.get(K_DECLINED_PUSH))

    @declined_notifications_permanently.setter
    def declined_notifications_permanently(self, value: bool) -> None:
        self.kv.set(K_DECLINED_PUSH, _encode_bool(value))

    @property
    def last_notification_ask_ts(self) -> Optional[float]:
        return _decode_float(self.kv.get(K_LAST_ASK))

    def mark_notification_asked(self, now: Optional[float] = None) -> None:
        self.kv.set(K_LAST_ASK, repr(float(time.time() if now is None else now)))

    # --- one-shot temp destination ---
    def set_temp_destination(self, url: str) -> None:
        self.kv.set(K_TEMP_URL, url)

    def peek_temp_destination(self) -> Optional[str]:
        return self.kv.get(K_TEMP_URL) or None

    def consume_temp_destination(self) -> Optional[str]:
        """Read-and-clear. A second call returns None."""
        url = self.kv.get(K_TEMP_URL)
        if url is not None:
            self.kv.delete(K_TEMP_URL)
        return url or None

    # --- admin ---
    def snapshot(self) -> LaunchSnapshot:
        return LaunchSnapshot(
            hasEverRunBefore=self.has_ever_run_before,
            appMode=self.app_mode,
            savedDestination=self.saved_destination,
            savedExpiry=self.saved_expiry,
            acceptedNotifications=self.accepted_notifications,
            declinedNotificationsPermanently=self.declined_notifications_permanently,
            lastNotificationAskTimestamp=self.last_notification_ask_ts,
            tempDestination=self.peek_temp_destination(),
        )

    def reset(self) -> None:
        """Explicit reset: clears sticky mode and every cached decision."""
        for k in ALL_KEYS:
            self.kv.delete(k)
        log(event="launch_state_reset")
