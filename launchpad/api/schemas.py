from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field

ConnectivityStatus = Literal["lost", "restored"]

class AttributionEvent(BaseModel):
    payload: Dict[str, Any] = Field(default_factory=dict)
    # Device attribution id reported by the host SDK
    deviceId: Optional[str] = None

class AttributionFailedEvent(BaseModel):
    reason: str = ""

class DeeplinkEvent(BaseModel):
    payload: Dict[str, Any] = Field(default_factory=dict)

class ConnectivityEvent(BaseModel):
    status: ConnectivityStatus

class PushPermissionEvent(BaseModel):
    allowed: bool
    # Result of the OS prompt when the host already asked
    osGranted: Optional[bool] = None

class PushOpenedEvent(BaseModel):
    url: str = Field(min_length=1)

class PresentationResponse(BaseModel):
    stage: Literal["BOOTING", "WEB_EXPERIENCE", "CLASSIC_FLOW", "OFFLINE_SCREEN"]
    destination: Optional[str] = None
    permissionPromptVisible: bool = False

class CookingTimeResponse(BaseModel):
    seconds: int
