"""
Tracking Router

Endpoints for feeding device fixes into the location tracker.
"""
from fastapi import APIRouter, Depends

from src.canvasser.api.dependencies import get_workspace
from src.canvasser.api.schemas import FixIngestResponse, TrackingStatus
from src.canvasser.models.location import LocationFix, TrackerError
from src.canvasser.services.workspace import CanvassingWorkspace

router = APIRouter(prefix="/api/v1/tracking", tags=["tracking"])


def _status(workspace: CanvassingWorkspace) -> TrackingStatus:
    tracker = workspace.tracker
    return TrackingStatus(
        state=tracker.state,
        error=tracker.error,
        error_message=tracker.error_message,
        current_fix=tracker.current_fix,
        total_distance_miles=tracker.total_distance_miles,
    )


@router.get("", response_model=TrackingStatus)
def get_tracking_status(workspace: CanvassingWorkspace = Depends(get_workspace)):
    return _status(workspace)


@router.post("/start", response_model=TrackingStatus)
def start_tracking(workspace: CanvassingWorkspace = Depends(get_workspace)):
    workspace.tracker.start()
    return _status(workspace)


@router.post("/stop", response_model=TrackingStatus)
def stop_tracking(workspace: CanvassingWorkspace = Depends(get_workspace)):
    workspace.tracker.stop()
    return _status(workspace)


@router.post("/fixes", response_model=FixIngestResponse)
def ingest_fix(fix: LocationFix, workspace: CanvassingWorkspace = Depends(get_workspace)):
    """
    Submit a device fix.

    Tracking starts on the first fix. Fixes closer than the displacement
    threshold to the last accepted one are discarded.
    """
    accepted = workspace.ingest_fix(fix)
    return FixIngestResponse(accepted=accepted, tracking=_status(workspace))


@router.post("/errors/{code}", response_model=TrackingStatus)
def report_position_error(code: TrackerError, workspace: CanvassingWorkspace = Depends(get_workspace)):
    """Report a device-side geolocation failure."""
    workspace.position_source.fail(code)
    return _status(workspace)


@router.post("/reset-distance", response_model=TrackingStatus)
def reset_distance(workspace: CanvassingWorkspace = Depends(get_workspace)):
    workspace.tracker.reset_distance()
    return _status(workspace)
