"""
Canvassing services.
"""
from src.canvasser.services.workspace import CanvassingWorkspace

__all__ = ["CanvassingWorkspace"]
