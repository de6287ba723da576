"""
Knock route planning: nearest-neighbor optimizer and saved routes.
"""
from src.canvasser.routing.optimizer import RouteOptimizer
from src.canvasser.routing.route_book import RouteBook

__all__ = [
    "RouteOptimizer",
    "RouteBook",
]
