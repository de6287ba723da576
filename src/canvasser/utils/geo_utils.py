"""
Geographic Utility Functions

Pure helpers for canvassing geometry: distances, territory area and centroid,
containment, overlap, bearings, buffers and grids.

Polygon math treats longitude/latitude as a local tangent plane. At the scale
of a sales territory (a few miles across) the error is negligible; this is not
a geodesic implementation.
"""
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Sequence, TypeVar, Union

from pydantic import ValidationError
from shapely import make_valid
from shapely.geometry import Polygon

from src.canvasser.exceptions import InvalidPolygon
from src.canvasser.models.geo import BoundingBox, Point

T = TypeVar("T")

EARTH_RADIUS_MILES = 3956
EARTH_RADIUS_METERS = 6371000
MILES_PER_DEGREE = math.radians(1) * EARTH_RADIUS_MILES
METERS_PER_MILE = 1609.344

PointLike = Union[Point, dict, Sequence[float]]


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float
) -> float:
    """
    Calculate great-circle distance between two points using Haversine formula.

    Args:
        lat1: Latitude of first point (decimal degrees)
        lon1: Longitude of first point (decimal degrees)
        lat2: Latitude of second point (decimal degrees)
        lon2: Longitude of second point (decimal degrees)

    Returns:
        Distance in miles

    Raises:
        ValueError: If any coordinate is NaN or infinite

    Formula:
        a = sin²(Δlat/2) + cos(lat1) × cos(lat2) × sin²(Δlon/2)
        c = 2 × asin(√a)
        distance = R × c  (R = Earth radius = 3,956 miles)
    """
    if not all(math.isfinite(v) for v in (lat1, lon1, lat2, lon2)):
        raise ValueError("Coordinates must be finite numbers")

    lon1, lat1, lon2, lat2 = map(math.radians, [lon1, lat1, lon2, lat2])

    dlon = lon2 - lon1
    dlat = lat2 - lat1
    a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return c * EARTH_RADIUS_MILES


def distance(a: Point, b: Point) -> float:
    """Great-circle distance between two points in miles."""
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def distance_meters(a: Point, b: Point) -> float:
    """Great-circle distance between two points in meters."""
    return distance(a, b) / EARTH_RADIUS_MILES * EARTH_RADIUS_METERS


def miles_to_feet(miles: float) -> int:
    """Convert miles to feet."""
    return int(miles * 5280)


def meters_to_miles(meters: float) -> float:
    """Convert meters to miles."""
    return meters / METERS_PER_MILE


def to_point(value: PointLike) -> Point:
    """
    Coerce a Point, a {"lat", "lng"} mapping or a (lat, lng) pair to a Point.

    Raises:
        ValueError: If the value cannot be read as a valid coordinate
    """
    if isinstance(value, Point):
        return value
    try:
        if isinstance(value, dict):
            return Point(lat=value["lat"], lng=value["lng"])
        lat, lng = value
        return Point(lat=lat, lng=lng)
    except (KeyError, TypeError, ValidationError) as e:
        raise ValueError(f"Not a valid coordinate: {value!r}") from e


def validate_ring(ring: Iterable[PointLike]) -> List[Point]:
    """
    Validate a polygon ring and return it closed.

    An open ring is closed by repeating its first point. No other repair is
    ever applied.

    Args:
        ring: Sequence of points

    Returns:
        Closed ring (first point == last point)

    Raises:
        InvalidPolygon: Fewer than 3 distinct points, or a non-finite or
            out-of-range coordinate
    """
    if ring is None:
        raise InvalidPolygon("ring is missing", point_count=0)

    points = []
    for raw in ring:
        try:
            points.append(to_point(raw))
        except ValueError as e:
            raise InvalidPolygon(str(e)) from e

    distinct = set(points)
    if len(distinct) < 3:
        raise InvalidPolygon(
            f"ring needs at least 3 distinct points, got {len(distinct)}",
            point_count=len(points),
        )

    if points[0] != points[-1]:
        points.append(points[0])
    return points


def _projected(ring: Sequence[Point]) -> List[tuple]:
    """Equirectangular projection in miles about the ring's mean latitude."""
    vertices = ring[:-1]
    mean_lat = math.fsum(p.lat for p in vertices) / len(vertices)
    x_scale = MILES_PER_DEGREE * math.cos(math.radians(mean_lat))
    return [(p.lng * x_scale, p.lat * MILES_PER_DEGREE) for p in ring]


def polygon_area(ring: Iterable[PointLike]) -> float:
    """
    Planar shoelace area of a closed ring.

    Args:
        ring: Polygon ring (closed or open)

    Returns:
        Area in square miles, always >= 0 and independent of winding

    Raises:
        InvalidPolygon: If the ring is degenerate
    """
    closed = validate_ring(ring)
    xy = _projected(closed)
    twice_area = math.fsum(
        x1 * y2 - x2 * y1
        for (x1, y1), (x2, y2) in zip(xy, xy[1:])
    )
    return abs(twice_area) / 2


def polygon_centroid(ring: Iterable[PointLike]) -> Point:
    """
    Area-weighted centroid of a closed ring.

    Falls back to the mean of the distinct vertices when the ring encloses
    no area (collinear points). The result is clamped to the ring's bounding
    box to absorb floating-point drift.

    Raises:
        InvalidPolygon: If the ring is degenerate
    """
    closed = validate_ring(ring)
    cross_terms = []
    cx_terms = []
    cy_terms = []
    for a, b in zip(closed, closed[1:]):
        cross = a.lng * b.lat - b.lng * a.lat
        cross_terms.append(cross)
        cx_terms.append((a.lng + b.lng) * cross)
        cy_terms.append((a.lat + b.lat) * cross)

    twice_area = math.fsum(cross_terms)
    box = bounding_box(closed)

    if abs(twice_area) < 1e-15:
        vertices = closed[:-1]
        lat = math.fsum(p.lat for p in vertices) / len(vertices)
        lng = math.fsum(p.lng for p in vertices) / len(vertices)
    else:
        lng = math.fsum(cx_terms) / (3 * twice_area)
        lat = math.fsum(cy_terms) / (3 * twice_area)

    return Point(
        lat=min(max(lat, box.southwest.lat), box.northeast.lat),
        lng=min(max(lng, box.southwest.lng), box.northeast.lng),
    )


def point_in_polygon(point: PointLike, ring: Iterable[PointLike]) -> bool:
    """
    Ray-casting containment test.

    Casts a ray towards +longitude and counts edge crossings. Points exactly
    on an edge get a fixed but unspecified answer; the same point and ring
    always give the same result.

    Raises:
        InvalidPolygon: If the ring is degenerate
        ValueError: If the point is not a valid coordinate
    """
    pt = to_point(point)
    closed = validate_ring(ring)
    x, y = pt.lng, pt.lat

    inside = False
    for a, b in zip(closed, closed[1:]):
        if (a.lat > y) != (b.lat > y):
            x_cross = (b.lng - a.lng) * (y - a.lat) / (b.lat - a.lat) + a.lng
            if x < x_cross:
                inside = not inside
    return inside


def to_shapely(ring: Iterable[PointLike]) -> Polygon:
    """Build a shapely polygon in (lng, lat) order from a validated ring."""
    return Polygon([p.as_xy() for p in validate_ring(ring)])


def polygons_overlap(ring_a: Iterable[PointLike], ring_b: Iterable[PointLike]) -> bool:
    """
    Whether two rings share a region of non-zero area.

    Rings that only touch along an edge or at a vertex do not overlap.
    Self-intersecting rings are resolved with make_valid for this test only.

    Raises:
        InvalidPolygon: If either ring is degenerate
    """
    coords_a = [p.as_xy() for p in validate_ring(ring_a)]
    coords_b = [p.as_xy() for p in validate_ring(ring_b)]

    # Fixed evaluation order keeps the answer symmetric
    first, second = sorted([coords_a, coords_b])
    poly_a = Polygon(first)
    poly_b = Polygon(second)
    if not poly_a.is_valid:
        poly_a = make_valid(poly_a)
    if not poly_b.is_valid:
        poly_b = make_valid(poly_b)

    if not poly_a.intersects(poly_b):
        return False
    return poly_a.intersection(poly_b).area > 0


def bearing(start: Point, end: Point) -> float:
    """
    Initial great-circle bearing from start to end.

    Returns:
        Degrees clockwise from north in [0, 360)
    """
    lat1, lat2 = math.radians(start.lat), math.radians(end.lat)
    dlon = math.radians(end.lng - start.lng)

    x = math.sin(dlon) * math.cos(lat2)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)
    degrees = (math.degrees(math.atan2(x, y)) + 360) % 360
    return 0.0 if degrees >= 360 else degrees


def bounding_box(points: Iterable[PointLike]) -> BoundingBox:
    """
    Smallest axis-aligned box containing all points.

    Raises:
        ValueError: If no points are given
    """
    pts = [to_point(p) for p in points]
    if not pts:
        raise ValueError("Cannot compute a bounding box of zero points")

    return BoundingBox(
        southwest=Point(lat=min(p.lat for p in pts), lng=min(p.lng for p in pts)),
        northeast=Point(lat=max(p.lat for p in pts), lng=max(p.lng for p in pts)),
    )


def destination_point(start: Point, bearing_degrees: float, distance_miles: float) -> Point:
    """Point reached by travelling distance_miles from start along a bearing."""
    angular = distance_miles / EARTH_RADIUS_MILES
    theta = math.radians(bearing_degrees)
    lat1 = math.radians(start.lat)
    lon1 = math.radians(start.lng)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(theta)
    )
    lon2 = lon1 + math.atan2(
        math.sin(theta) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    lng = (math.degrees(lon2) + 540) % 360 - 180
    return Point(lat=math.degrees(lat2), lng=lng)


def buffer_point(center: Point, radius_miles: float, segments: int = 64) -> List[Point]:
    """
    Closed ring approximating a circle around a point.

    Used for proximity alerts around a property or the rep's position.

    Raises:
        ValueError: If radius_miles <= 0 or segments < 3
    """
    if radius_miles <= 0:
        raise ValueError("Buffer radius must be positive")
    if segments < 3:
        raise ValueError("Buffer needs at least 3 segments")

    ring = [
        destination_point(center, 360.0 * i / segments, radius_miles)
        for i in range(segments)
    ]
    ring.append(ring[0])
    return ring


def find_points_in_radius(
    center: Point,
    items: Iterable[T],
    radius_miles: float,
    key: Callable[[T], Point] = lambda item: item.location,
) -> List[T]:
    """Items whose location lies within radius_miles of center, input order kept."""
    return [item for item in items if distance(center, key(item)) <= radius_miles]


@dataclass
class Cluster:
    """Group of nearby items for map display."""

    center: Point
    members: List[Any] = field(default_factory=list)


def cluster_points(
    items: Sequence[T],
    radius_miles: float = 0.1,
    key: Callable[[T], Point] = lambda item: item.location,
) -> List[Cluster]:
    """
    Greedy single-pass clustering.

    Each unclaimed item seeds a cluster and absorbs every other unclaimed item
    within radius_miles of it.
    """
    clusters = []
    claimed = set()

    for index, item in enumerate(items):
        if index in claimed:
            continue
        seed = key(item)
        cluster = Cluster(center=seed, members=[item])
        claimed.add(index)

        for other_index in range(index + 1, len(items)):
            if other_index in claimed:
                continue
            other = items[other_index]
            if distance(seed, key(other)) <= radius_miles:
                cluster.members.append(other)
                claimed.add(other_index)

        clusters.append(cluster)

    return clusters


def generate_grid_in_polygon(ring: Iterable[PointLike], spacing_miles: float = 0.1) -> List[Point]:
    """
    Evenly spaced points inside a ring, for systematic canvassing sweeps.

    Raises:
        ValueError: If spacing_miles <= 0
        InvalidPolygon: If the ring is degenerate
    """
    if spacing_miles <= 0:
        raise ValueError("Grid spacing must be positive")

    closed = validate_ring(ring)
    box = bounding_box(closed)
    step = spacing_miles / MILES_PER_DEGREE

    cols = int((box.northeast.lng - box.southwest.lng) / step) + 1
    rows = int((box.northeast.lat - box.southwest.lat) / step) + 1

    grid = []
    for col in range(cols):
        lng = box.southwest.lng + col * step
        for row in range(rows):
            lat = box.southwest.lat + row * step
            candidate = Point(lat=lat, lng=lng)
            if point_in_polygon(candidate, closed):
                grid.append(candidate)
    return grid


def simplify_ring(ring: Iterable[PointLike], tolerance: float = 0.0001) -> List[Point]:
    """
    Reduce the vertex count of a ring, preserving topology.

    Returns the original (closed) ring when simplification would leave fewer
    than 3 distinct points.
    """
    closed = validate_ring(ring)
    simplified = to_shapely(closed).simplify(tolerance, preserve_topology=True)

    if simplified.is_empty or simplified.geom_type != "Polygon":
        return closed

    coords = [Point(lat=y, lng=x) for x, y in simplified.exterior.coords]
    if len(set(coords)) < 3:
        return closed
    return coords
