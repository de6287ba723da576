"""
Summary Router

End-of-day canvassing summary as JSON or a CSV download.
"""
from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from src.canvasser.reports.day_summary import DaySummary
from src.canvasser.api.dependencies import get_workspace
from src.canvasser.services.workspace import CanvassingWorkspace

router = APIRouter(prefix="/api/v1/summary", tags=["summary"])


@router.get("/{day}", response_model=DaySummary)
def get_day_summary(day: date, workspace: CanvassingWorkspace = Depends(get_workspace)):
    """
    Properties pinned or worked on a day, grouped by current status.

    Args:
        day: ISO date (YYYY-MM-DD), interpreted in the report timezone
    """
    return workspace.day_summary(day)


@router.get("/{day}/csv")
def download_day_summary(day: date, workspace: CanvassingWorkspace = Depends(get_workspace)):
    """CSV export (Address, Status, Notes, Time) as an attachment."""
    summary = workspace.day_summary(day)
    filename = workspace.aggregator.export_filename(day)
    return Response(
        content=workspace.aggregator.to_csv(summary),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
