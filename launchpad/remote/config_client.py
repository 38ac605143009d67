import time
from typing import Any, Dict, Optional

import httpx

from launchpad.core.errors import RemoteConfigError
from launchpad.observability.logging import log
from launchpad.remote.payloads import ConfigResult, parse_config_response
from launchpad.settings import settings


class ConfigService:
    def fetch(self, request: Dict[str, Any]) -> ConfigResult:
        raise NotImplementedError


class HttpConfigService(ConfigService):
    """POSTs the merged attribution to the remote config endpoint. One shot, no retry."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[float] = None):
        self.url = url if url is not None else settings.CONFIG_URL
        self.timeout = float(timeout if timeout is not None else settings.HTTP_TIMEOUT_SEC)

    def fetch(self, request: Dict[str, Any]) -> ConfigResult:
        if not self.url:
            raise RemoteConfigError("config_url_not_set")

        start = time.time()
        log(event="remote_config_attempt", url=self.url, timeoutSec=self.timeout, request=request)
        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(self.url, json=request)
        except httpx.HTTPError as e:
            log(
                event="remote_config_exception",
                elapsedMs=int((time.time() - start) * 1000),
                errorType=type(e).__name__,
                error=str(e)[:300],
            )
            raise RemoteConfigError(f"transport:{type(e).__name__}") from e

        elapsed_ms = int((time.time() - start) * 1000)
        if not (200 <= resp.status_code < 300):
            log(
                event="remote_config_non2xx",
                statusCode=int(resp.status_code),
                elapsedMs=elapsed_ms,
                responseText=(resp.text or "")[:300],
            )
            raise RemoteConfigError(f"non_2xx:{resp.status_code}", status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            log(event="remote_config_bad_json", statusCode=int(resp.status_code), elapsedMs=elapsed_ms)
            raise RemoteConfigError("malformed_json", status_code=resp.status_code) from e

        result = parse_config_response(data)
        log(event="remote_config_success", statusCode=int(resp.status_code), elapsedMs=elapsed_ms, expires=result.expires)
        return result
