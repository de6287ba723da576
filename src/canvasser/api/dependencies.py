"""
FastAPI Dependencies

Provides dependency injection for database sessions and the shared
canvassing workspace.
"""
from threading import Lock
from typing import Generator, Optional

from sqlalchemy.orm import Session

from src.canvasser.db.session import SessionLocal
from src.canvasser.services.workspace import CanvassingWorkspace

_workspace: Optional[CanvassingWorkspace] = None
_workspace_lock = Lock()


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Commits when the request handler returns without raising.

    Yields:
        SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_workspace() -> CanvassingWorkspace:
    """
    Workspace dependency.

    Returns:
        The process-wide workspace, built on first use
    """
    global _workspace
    with _workspace_lock:
        if _workspace is None:
            _workspace = CanvassingWorkspace()
        return _workspace

