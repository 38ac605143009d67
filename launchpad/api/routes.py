from fastapi import APIRouter, Depends, HTTPException, Query

from launchpad.api.auth import require_api_key
from launchpad.api.deps import get_director, settle
from launchpad.api.schemas import (
    AttributionEvent,
    AttributionFailedEvent,
    ConnectivityEvent,
    CookingTimeResponse,
    DeeplinkEvent,
    PresentationResponse,
    PushOpenedEvent,
    PushPermissionEvent,
)
from launchpad.classic.cooking import calculate_cooking_time
from launchpad.core.director import LaunchDirector

router = APIRouter(prefix="/launch", dependencies=[Depends(require_api_key)])
classic_router = APIRouter(prefix="/classic")


def _state(director: LaunchDirector) -> PresentationResponse:
    settle(director)
    p = director.presentation()
    return PresentationResponse(
        stage=p.stage,
        destination=p.destination,
        permissionPromptVisible=p.permissionPromptVisible,
    )


@router.get("/state", response_model=PresentationResponse)
def launch_state(director: LaunchDirector = Depends(get_director)):
    return _state(director)


@router.post("/events/attribution", response_model=PresentationResponse)
def attribution_event(body: AttributionEvent, director: LaunchDirector = Depends(get_director)):
    set_device_id = getattr(director.attribution_source, "set_device_id", None)
    if body.deviceId and callable(set_device_id):
        set_device_id(body.deviceId)
    director.on_attribution(body.payload)
    return _state(director)


@router.post("/events/attribution-failed", response_model=PresentationResponse)
def attribution_failed_event(body: AttributionFailedEvent, director: LaunchDirector = Depends(get_director)):
    director.on_attribution_failed(body.reason)
    return _state(director)


@router.post("/events/deeplink", response_model=PresentationResponse)
def deeplink_event(body: DeeplinkEvent, director: LaunchDirector = Depends(get_director)):
    director.on_deeplink(body.payload)
    return _state(director)


@router.post("/events/connectivity", response_model=PresentationResponse)
def connectivity_event(body: ConnectivityEvent, director: LaunchDirector = Depends(get_director)):
    director.on_connectivity(body.status)
    return _state(director)


@router.post("/events/push-permission", response_model=PresentationResponse)
def push_permission_event(body: PushPermissionEvent, director: LaunchDirector = Depends(get_director)):
    os_granted = body.osGranted if body.osGranted is not None else body.allowed
    director.on_push_permission_answered(body.allowed, os_granted=os_granted)
    return _state(director)


@router.post("/events/push-opened", response_model=PresentationResponse)
def push_opened_event(body: PushOpenedEvent, director: LaunchDirector = Depends(get_director)):
    director.on_push_opened(body.url)
    return _state(director)


@classic_router.get("/cooking-time", response_model=CookingTimeResponse)
def cooking_time(
    method: str = Query("Boiled"),
    doneness: str = Query("Soft"),
    size: str = Query("M"),
    temperature: str = Query("Room"),
):
    try:
        return CookingTimeResponse(seconds=calculate_cooking_time(method, doneness, size, temperature))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
