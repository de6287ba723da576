"""
Canvassing Platform - Core Package

Geospatial core for door-to-door canvassing: territories, properties,
routes, live tracking and reporting.
"""

__version__ = "0.1.0"
