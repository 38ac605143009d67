from dataclasses import dataclass
from typing import Optional


@dataclass
class LaunchSnapshot:
    """Point-in-time view of everything persisted between launches."""
    hasEverRunBefore: bool = False
    appMode: Optional[str] = None  # Classic / Remote / None (never decided)
    savedDestination: Optional[str] = None
    savedExpiry: Optional[float] = None

    acceptedNotifications: Optional[bool] = None
    declinedNotificationsPermanently: Optional[bool] = None
    lastNotificationAskTimestamp: Optional[float] = None

    # One-shot destination from a push open; cleared once read
    tempDestination: Optional[str] = None


@dataclass
class PresentationState:
    stage: str
    destination: Optional[str] = None
    permissionPromptVisible: bool = False
