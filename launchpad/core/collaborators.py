from typing import Callable, Optional

PushTokenProvider = Callable[[], Optional[str]]


class AttributionSource:
    """The attribution SDK seen from the director: only the device id is pulled."""

    def device_id(self) -> Optional[str]:
        raise NotImplementedError


class StaticAttributionSource(AttributionSource):
    """Device id handed over by the host (it owns the real SDK)."""

    def __init__(self, device_id: Optional[str] = None):
        self._device_id = device_id

    def set_device_id(self, device_id: Optional[str]) -> None:
        if device_id:
            self._device_id = device_id

    def device_id(self) -> Optional[str]:
        return self._device_id


class PermissionRequester:
    """Blocking OS-level push permission request. Runs off the control thread."""

    def request(self) -> bool:
        raise NotImplementedError


class StaticPermissionRequester(PermissionRequester):
    def __init__(self, granted: bool):
        self.granted = granted

    def request(self) -> bool:
        return self.granted
