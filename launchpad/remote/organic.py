"""
Organic install validation.

Fresh organic installs ask the attribution provider's install-data endpoint
whether a campaign can still be matched to this device. The returned object
replaces the organic attribution payload for the rest of the decision.
"""
import time
from typing import Any, Dict, Optional

import httpx

from launchpad.core.errors import OrganicValidationError
from launchpad.observability.logging import log
from launchpad.settings import settings


class OrganicValidator:
    def validate(self, device_id: Optional[str]) -> Dict[str, Any]:
        raise NotImplementedError


def build_validation_url(base: str, app_id: str) -> str:
    return f"{base.rstrip('/')}/id{app_id}"


class HttpOrganicValidator(OrganicValidator):
    def __init__(
        self,
        base_url: Optional[str] = None,
        app_id: Optional[str] = None,
        dev_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url if base_url is not None else settings.ORGANIC_VALIDATION_URL
        self.app_id = app_id if app_id is not None else settings.APP_ID
        self.dev_key = dev_key if dev_key is not None else settings.DEV_KEY
        self.timeout = float(timeout if timeout is not None else settings.HTTP_TIMEOUT_SEC)

    def validate(self, device_id: Optional[str]) -> Dict[str, Any]:
        if not device_id:
            raise OrganicValidationError("missing_device_id")

        url = build_validation_url(self.base_url, self.app_id)
        params = {"devkey": self.dev_key, "device_id": device_id}
        start = time.time()
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.get(url, params=params, headers={"accept": "application/json"})
        except httpx.HTTPError as e:
            log(event="organic_validation_exception", errorType=type(e).__name__, error=str(e)[:300])
            raise OrganicValidationError(f"transport:{type(e).__name__}") from e

        elapsed_ms = int((time.time() - start) * 1000)
        if resp.status_code != 200:
            log(event="organic_validation_non200", statusCode=int(resp.status_code), elapsedMs=elapsed_ms)
            raise OrganicValidationError(f"status:{resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise OrganicValidationError("malformed_json", status_code=200) from e
        if not isinstance(data, dict):
            raise OrganicValidationError("response_not_object", status_code=200)

        log(event="organic_validation_success", elapsedMs=elapsed_ms, keys=len(data))
        return data
