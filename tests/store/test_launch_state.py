import pytest
from unittest.mock import MagicMock, patch

from launchpad.core import stages
from launchpad.store.kv import MemoryKeyValueStore, RedisKeyValueStore, build_store
from launchpad.store.launch_state import K_APP_MODE, K_TEMP_URL, LaunchStore


@pytest.fixture
def store():
    return LaunchStore(MemoryKeyValueStore())


def test_defaults_on_fresh_install(store):
    snap = store.snapshot()
    assert snap.hasEverRunBefore is False
    assert snap.appMode is None
    assert snap.savedDestination is None
    assert snap.savedExpiry is None
    assert snap.acceptedNotifications is None
    assert snap.declinedNotificationsPermanently is None
    assert snap.lastNotificationAskTimestamp is None
    assert snap.tempDestination is None


def test_typed_round_trip(store):
    store.has_ever_run_before = True
    store.app_mode = stages.MODE_REMOTE
    store.save_destination("https://w", 999)
    store.accepted_notifications = False
    store.declined_notifications_permanently = True
    store.mark_notification_asked(1234.5)

    assert store.has_ever_run_before is True
    assert store.app_mode == stages.MODE_REMOTE
    assert store.saved_destination == "https://w"
    assert store.saved_expiry == 999.0
    assert store.accepted_notifications is False
    assert store.declined_notifications_permanently is True
    assert store.last_notification_ask_ts == 1234.5


def test_unknown_app_mode_rejected(store):
    with pytest.raises(ValueError):
        store.app_mode = "HenView"


def test_garbage_values_read_as_absent():
    kv = MemoryKeyValueStore({K_APP_MODE: "bogus", "saved_expiry": "soon"})
    store = LaunchStore(kv)
    assert store.app_mode is None
    assert store.saved_expiry is None


def test_temp_destination_read_and_clear(store):
    store.set_temp_destination("https://promo")
    assert store.peek_temp_destination() == "https://promo"

    assert store.consume_temp_destination() == "https://promo"
    assert store.consume_temp_destination() is None
    assert K_TEMP_URL not in store.kv.snapshot()


def test_empty_temp_destination_is_cleared_and_ignored(store):
    store.set_temp_destination("")
    assert store.consume_temp_destination() is None
    assert K_TEMP_URL not in store.kv.snapshot()


def test_reset_clears_sticky_mode(store):
    store.app_mode = stages.MODE_CLASSIC
    store.has_ever_run_before = True
    store.save_destination("https://w", 1)

    store.reset()

    assert store.app_mode is None
    assert store.has_ever_run_before is False
    assert store.saved_destination is None
    assert store.kv.snapshot() == {}


def test_redis_store_prefixes_keys():
    r = MagicMock()
    r.get.return_value = "Remote"
    kv = RedisKeyValueStore(r, prefix="launch:")

    assert kv.get("app_mode") == "Remote"
    r.get.assert_called_with("launch:app_mode")

    kv.set("has_ever_run_before", "1")
    r.set.assert_called_with("launch:has_ever_run_before", "1")

    kv.delete("temp_destination")
    r.delete.assert_called_with("launch:temp_destination")


@patch("launchpad.store.kv.settings")
def test_build_store_memory_backend(mock_settings):
    mock_settings.STORE_BACKEND = "memory"
    assert isinstance(build_store(), MemoryKeyValueStore)


@patch("launchpad.store.kv.get_redis")
@patch("launchpad.store.kv.settings")
def test_build_store_redis_backend(mock_settings, mock_get_redis):
    mock_settings.STORE_BACKEND = "redis"
    mock_settings.STORE_PREFIX = "launch:"
    store = build_store()
    assert isinstance(store, RedisKeyValueStore)
    mock_get_redis.assert_called_once()


@patch("launchpad.store.kv.settings")
def test_build_store_unknown_backend(mock_settings):
    mock_settings.STORE_BACKEND = "sqlite"
    with pytest.raises(RuntimeError, match="Unknown STORE_BACKEND"):
        build_store()
