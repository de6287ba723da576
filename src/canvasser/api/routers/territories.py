"""
Territories Router

Endpoints for drawing, editing and reporting on sales territories.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.canvasser.api.dependencies import get_workspace
from src.canvasser.api.schemas import TerritoryCreate, TerritoryUpdate, TerritoryWithStats
from src.canvasser.models.property import Property
from src.canvasser.models.territory import Territory, TerritoryStats
from src.canvasser.services.workspace import CanvassingWorkspace

router = APIRouter(prefix="/api/v1/territories", tags=["territories"])


@router.get("", response_model=List[Territory])
def list_territories(
    rep_id: Optional[str] = Query(None, description="Only territories assigned to this rep"),
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    if rep_id:
        return workspace.registry.reps_territories(rep_id)
    return workspace.registry.all()


@router.post("", response_model=Territory, status_code=201)
def create_territory(
    body: TerritoryCreate,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """
    Create a territory from a drawn ring.

    Unassigned properties inside the ring are assigned to it.
    """
    return workspace.create_territory(
        body.name,
        body.ring,
        color=body.color,
        description=body.description,
        assigned_reps=body.assigned_reps,
    )


@router.get("/stats", response_model=List[TerritoryWithStats])
def list_territory_stats(workspace: CanvassingWorkspace = Depends(get_workspace)):
    return [
        TerritoryWithStats(territory=territory, stats=stats)
        for territory, stats in workspace.registry.all_with_stats(workspace.ledger)
    ]


@router.get("/{territory_id}", response_model=Territory)
def get_territory(territory_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.registry.get(territory_id)


@router.patch("/{territory_id}", response_model=Territory)
def update_territory(
    territory_id: str,
    body: TerritoryUpdate,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """
    Rename, redraw or reassign a territory.

    A new ring recomputes area, centroid and overlaps.
    """
    territory = workspace.registry.get(territory_id)
    if body.name is not None:
        territory = workspace.registry.rename(territory_id, body.name)
    if body.ring is not None:
        territory = workspace.update_territory_ring(territory_id, body.ring)
    if body.assigned_reps is not None:
        territory = workspace.registry.assign_reps(territory_id, body.assigned_reps)
    return territory


@router.delete("/{territory_id}", response_model=Territory)
def delete_territory(territory_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.delete_territory(territory_id)


@router.get("/{territory_id}/stats", response_model=TerritoryStats)
def get_territory_stats(territory_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.territory_stats(territory_id)


@router.get("/{territory_id}/overlapping", response_model=List[Territory])
def get_overlapping_territories(territory_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    """Live overlap check against every other territory's current ring."""
    return workspace.registry.find_overlapping(territory_id)


@router.get("/{territory_id}/properties", response_model=List[Property])
def get_territory_properties(territory_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    workspace.registry.get(territory_id)
    return workspace.ledger.query(territory_id=territory_id)
