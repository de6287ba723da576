"""
Properties Router

Endpoints for pinning properties and logging door-knock outcomes.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.canvasser.api.dependencies import get_workspace
from src.canvasser.api.schemas import (
    LocationCorrection,
    NoteCreate,
    PropertyDetailsUpdate,
    StatusUpdate,
    VisitCreate,
)
from src.canvasser.models.property import Property, PropertyDraft, PropertyStatus, Quality, Visit
from src.canvasser.services.workspace import CanvassingWorkspace

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.get("", response_model=List[Property])
def list_properties(
    status: Optional[PropertyStatus] = Query(None),
    quality: Optional[Quality] = Query(None),
    territory_id: Optional[str] = Query(None),
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """
    Query properties. Filters combine with AND; omitted filters match all.
    """
    return workspace.ledger.query(status=status, quality=quality, territory_id=territory_id)


@router.post("", response_model=Property, status_code=201)
def create_property(
    draft: PropertyDraft,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """
    Pin a property.

    Without an address the location is reverse-geocoded when a geocoder is
    configured, otherwise a coordinate placeholder is used.
    """
    return workspace.add_property(draft)


@router.post("/import", response_model=List[Property], status_code=201)
def import_properties(
    drafts: List[PropertyDraft],
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """
    Pin a batch of properties, e.g. a lead list exported from another tool.

    Each draft is handled like a single create, including territory assignment.
    """
    return workspace.import_properties(drafts)


@router.get("/{property_id}", response_model=Property)
def get_property(property_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.ledger.get(property_id)


@router.patch("/{property_id}", response_model=Property)
def update_property_details(
    property_id: str,
    body: PropertyDetailsUpdate,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    return workspace.ledger.update_details(
        property_id,
        quality=body.quality,
        priority=body.priority,
        address=body.address,
    )


@router.post("/{property_id}/status", response_model=Property)
def set_property_status(
    property_id: str,
    body: StatusUpdate,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """
    Record a door-knock outcome.

    Appends one status_change visit and updates the knock counters.
    """
    return workspace.change_status(property_id, body.status, body.note)


@router.post("/{property_id}/notes", response_model=Visit, status_code=201)
def add_property_note(
    property_id: str,
    body: NoteCreate,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    return workspace.ledger.append_note(property_id, body.text)


@router.post("/{property_id}/visits", response_model=Visit, status_code=201)
def log_property_visit(
    property_id: str,
    body: VisitCreate,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    return workspace.ledger.log_visit(property_id, body.note)


@router.get("/{property_id}/visits", response_model=List[Visit])
def list_property_visits(property_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.ledger.get(property_id).visits


@router.put("/{property_id}/location", response_model=Property)
def correct_property_location(
    property_id: str,
    body: LocationCorrection,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    return workspace.ledger.correct_location(property_id, body.latitude, body.longitude)


@router.delete("/{property_id}", response_model=Property)
def delete_property(property_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.delete_property(property_id)
