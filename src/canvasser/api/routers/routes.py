"""
Routes Router

Endpoints for optimizing knock routes and managing saved routes.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from src.canvasser.api.dependencies import get_workspace
from src.canvasser.api.schemas import OptimizedRouteResponse, RouteOptimizeRequest, RouteSaveRequest
from src.canvasser.models.property import Property
from src.canvasser.models.route import Route
from src.canvasser.services.workspace import CanvassingWorkspace

router = APIRouter(prefix="/api/v1/routes", tags=["routes"])


@router.post("/optimize", response_model=OptimizedRouteResponse)
def optimize_route(
    body: RouteOptimizeRequest,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """
    Order stops with the nearest-neighbor heuristic.

    Starts from body.start, else the latest tracked fix, else the map center.

    Raises:
        HTTPException: 400 if neither property ids nor a count is given
    """
    if body.property_ids is not None:
        optimized = workspace.plan_route(body.property_ids, body.start)
    elif body.count is not None:
        optimized = workspace.quick_route(body.count, body.start)
    else:
        raise HTTPException(status_code=400, detail="Provide propertyIds or count")

    return OptimizedRouteResponse(
        properties=optimized.properties,
        total_distance=optimized.total_distance,
        estimated_time=optimized.estimated_time,
    )


@router.get("", response_model=List[Route])
def list_routes(workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.route_book.all()


@router.post("", response_model=Route, status_code=201)
def save_route(
    body: RouteSaveRequest,
    workspace: CanvassingWorkspace = Depends(get_workspace),
):
    """Optimize the given properties and save the result under a name."""
    optimized = workspace.plan_route(body.property_ids, body.start)
    return workspace.save_route(body.name, optimized, activate=body.activate)


@router.get("/active", response_model=List[Property])
def get_active_route_stops(workspace: CanvassingWorkspace = Depends(get_workspace)):
    """Stops of the active route in order; deleted properties are skipped."""
    return workspace.active_route_stops()


@router.get("/{route_id}", response_model=Route)
def get_route(route_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.route_book.get(route_id)


@router.post("/{route_id}/activate", response_model=Route)
def activate_route(route_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.route_book.activate(route_id)


@router.post("/{route_id}/complete", response_model=Route)
def complete_route(route_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.route_book.complete(route_id)


@router.delete("/{route_id}", response_model=Route)
def delete_route(route_id: str, workspace: CanvassingWorkspace = Depends(get_workspace)):
    return workspace.route_book.delete(route_id)
