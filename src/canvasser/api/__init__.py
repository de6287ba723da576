"""
Canvassing REST API.
"""
