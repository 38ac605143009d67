import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from launchpad.core.errors import RemoteConfigError
from launchpad.settings import settings


@dataclass
class ConfigResult:
    url: str
    expires: float


def merge_attribution(attribution: Optional[Dict[str, Any]], deeplink: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Attribution keys win; deeplink only fills keys attribution lacks."""
    merged = dict(attribution or {})
    for k, v in (deeplink or {}).items():
        if k not in merged:
            merged[k] = v
    return merged


def device_locale() -> str:
    """Upper-cased 2-letter language code, e.g. 'de_DE.UTF-8' -> 'DE'. Default 'EN'."""
    raw = (settings.DEVICE_LOCALE or os.getenv("LANG", "") or "").strip()
    lang = raw.split(".")[0].replace("-", "_").split("_")[0]
    if len(lang) >= 2 and lang[:2].isalpha() and lang.lower() not in ("c", "posix"):
        return lang[:2].upper()
    return "EN"


def build_config_request(
    attribution: Dict[str, Any],
    *,
    device_id: Optional[str],
    push_token: Optional[str] = None,
    locale: Optional[str] = None,
) -> Dict[str, Any]:
    body = dict(attribution or {})
    body.update({
        "af_id": device_id or "",
        "os": settings.PLATFORM_TAG,
        "store_id": f"id{settings.APP_ID}",
        "firebase_project_id": settings.FIREBASE_PROJECT_ID or None,
        "bundle_id": settings.BUNDLE_ID,
        "locale": locale or device_locale(),
        "push_token": push_token or None,
    })
    return body


def parse_config_response(data: Any) -> ConfigResult:
    """
    Success requires truthy `ok`, a non-empty string `url` and a numeric
    `expires`. Anything else raises RemoteConfigError.
    """
    if not isinstance(data, dict):
        raise RemoteConfigError("response_not_object")
    if not data.get("ok"):
        raise RemoteConfigError("response_not_ok")
    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        raise RemoteConfigError("response_missing_url")
    expires = data.get("expires")
    # bool is an int subclass; reject it explicitly
    if isinstance(expires, bool) or not isinstance(expires, (int, float)):
        raise RemoteConfigError("response_missing_expires")
    return ConfigResult(url=url.strip(), expires=float(expires))
