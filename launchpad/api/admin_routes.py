from dataclasses import asdict

from fastapi import APIRouter, Depends

from launchpad.api.auth import require_admin
from launchpad.api.deps import get_director
from launchpad.core.director import LaunchDirector

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/launch-state")
def get_launch_state(director: LaunchDirector = Depends(get_director), _=Depends(require_admin)):
    """Persisted launch decision plus the live stage."""
    return {
        "persisted": asdict(director.store.snapshot()),
        "presentation": asdict(director.presentation()),
    }


@router.post("/launch-state/reset")
def reset_launch_state(director: LaunchDirector = Depends(get_director), _=Depends(require_admin)):
    """
    Clears sticky Remote/Classic mode and the cached destination. Takes effect
    on the next launch; the running director keeps its current stage.
    """
    director.store.reset()
    return {"reset": True, "persisted": asdict(director.store.snapshot())}
