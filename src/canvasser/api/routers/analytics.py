"""
Analytics Router

Knock counters, time-framed metrics, map view state and snapshot
persistence.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config.settings import settings
from src.canvasser.api.dependencies import get_db, get_workspace
from src.canvasser.api.schemas import MapViewUpdate, SnapshotResult
from src.canvasser.models.snapshot import Analytics, MapView
from src.canvasser.reports.knock_metrics import KnockMetrics, TimeFrame
from src.canvasser.services.workspace import CanvassingWorkspace

router = APIRouter(prefix="/api/v1", tags=["analytics"])


@router.get("/analytics", response_model=Analytics)
def get_analytics(workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.analytics


@router.get("/analytics/metrics", response_model=KnockMetrics)
def get_knock_metrics(
    time_frame: TimeFrame = Query(TimeFrame.TODAY),
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    return workspace.knock_metrics(time_frame)


@router.get("/map-view", response_model=MapView)
def get_map_view(workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.map_view


@router.patch("/map-view", response_model=MapView)
def update_map_view(body: MapViewUpdate, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.update_map_view(**body.model_dump(exclude_none=True))


@router.post("/snapshot/save", response_model=SnapshotResult)
def save_snapshot(
    key: Optional[str] = Query(None),
    workspace: CanvassingWorkspace = Depends(get_workspace),
    db: Session = Depends(get_db),
):
    """Persist the whole workspace under a key (settings.snapshot_key by default)."""
    key = key or settings.snapshot_key
    workspace.save(db, key)
    return SnapshotResult(
        key=key,
        properties=workspace.ledger.count(),
        territories=len(workspace.registry.all()),
        routes=len(workspace.route_book.all()),
    )


@router.post("/snapshot/load", response_model=SnapshotResult)
def load_snapshot(
    key: Optional[str] = Query(None),
    workspace: CanvassingWorkspace = Depends(get_workspace),
    db: Session = Depends(get_db),
):
    """Replace the workspace with the snapshot stored under a key, if any."""
    key = key or settings.snapshot_key
    loaded = workspace.load(db, key)
    return SnapshotResult(
        key=key,
        loaded=loaded,
        properties=workspace.ledger.count(),
        territories=len(workspace.registry.all()),
        routes=len(workspace.route_book.all()),
    )
