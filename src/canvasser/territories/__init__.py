"""
Territory registry: hand-drawn sales regions and their statistics.
"""
from src.canvasser.territories.registry import TerritoryRegistry

__all__ = ["TerritoryRegistry"]
