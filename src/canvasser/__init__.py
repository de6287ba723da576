"""
Canvassing Geospatial Core

Territories, property visit logging, knock routes, live location tracking
and day summaries for door-to-door roofing sales.
"""

__version__ = "0.1.0"
