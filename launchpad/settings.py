import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    API_KEY: str = os.getenv("API_KEY", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    # App identity (sent to remote config / organic validation)
    APP_ID: str = os.getenv("APP_ID", "6747212345")
    DEV_KEY: str = os.getenv("DEV_KEY", "")
    BUNDLE_ID: str = os.getenv("BUNDLE_ID", "com.eggcookstudio.app")
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")
    PLATFORM_TAG: str = os.getenv("PLATFORM_TAG", "iOS")
    # Empty -> derive from LANG
    DEVICE_LOCALE: str = os.getenv("DEVICE_LOCALE", "")

    # Endpoints
    CONFIG_URL: str = os.getenv("CONFIG_URL", "")
    ORGANIC_VALIDATION_URL: str = os.getenv(
        "ORGANIC_VALIDATION_URL", "https://gcdsdk.appsflyer.com/install_data/v4.0/"
    )
    HTTP_TIMEOUT_SEC: float = float(os.getenv("HTTP_TIMEOUT_SEC", "10.0"))

    # Launch decision timers
    ORGANIC_DELAY_SEC: float = float(os.getenv("ORGANIC_DELAY_SEC", "5.0"))
    MERGE_TIMER_SEC: float = float(os.getenv("MERGE_TIMER_SEC", "5.0"))
    # Bounded wait for the attribution callback. 0 disables the timeout.
    ATTRIBUTION_TIMEOUT_SEC: float = float(os.getenv("ATTRIBUTION_TIMEOUT_SEC", "30.0"))
    # Don't re-show the push prompt within this window after a decline (3 days)
    PUSH_ASK_COOLDOWN_SEC: int = int(os.getenv("PUSH_ASK_COOLDOWN_SEC", str(3 * 24 * 60 * 60)))

    # Persistence
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "redis").lower()  # redis / memory
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    STORE_PREFIX: str = os.getenv("STORE_PREFIX", "launch:")

    # Connectivity probe
    CONNECTIVITY_PROBE_URL: str = os.getenv("CONNECTIVITY_PROBE_URL", "https://www.apple.com/library/test/success.html")
    CONNECTIVITY_POLL_SEC: float = float(os.getenv("CONNECTIVITY_POLL_SEC", "5.0"))
    CONNECTIVITY_ENABLED: bool = os.getenv("CONNECTIVITY_ENABLED", "true").lower() == "true"

    # Security & Privacy
    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"
    ADMIN_RBAC_ENABLED: bool = os.getenv("ADMIN_RBAC_ENABLED", "true").lower() == "true"
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

settings = Settings()
