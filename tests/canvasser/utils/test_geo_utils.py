"""
Tests for Geographic Utility Functions
"""
import math

import pytest

from src.canvasser.exceptions import InvalidPolygon
from src.canvasser.models.geo import Point
from src.canvasser.utils.geo_utils import (
    bearing,
    bounding_box,
    buffer_point,
    cluster_points,
    distance,
    distance_meters,
    find_points_in_radius,
    generate_grid_in_polygon,
    haversine_distance,
    meters_to_miles,
    miles_to_feet,
    point_in_polygon,
    polygon_area,
    polygon_centroid,
    polygons_overlap,
    simplify_ring,
    to_point,
    validate_ring,
)


class TestDistance:
    """Tests for great-circle distance."""

    def test_same_point_is_zero(self):
        """Test distance from a point to itself."""
        p = Point(lat=40.7608, lng=-111.8910)
        assert distance(p, p) == 0

    def test_symmetric(self):
        """Test distance is the same in both directions."""
        a = Point(lat=40.7608, lng=-111.8910)
        b = Point(lat=40.2338, lng=-111.6585)
        assert distance(a, b) == pytest.approx(distance(b, a))

    def test_one_degree_latitude(self):
        """Test one degree of latitude is about 69 miles."""
        miles = haversine_distance(0, 0, 1, 0)
        assert miles == pytest.approx(69.04, abs=0.1)

    def test_salt_lake_to_provo(self):
        """Test a known city-to-city distance."""
        miles = haversine_distance(40.7608, -111.8910, 40.2338, -111.6585)
        assert 37 < miles < 39

    def test_meters_matches_miles(self):
        """Test the meters helper agrees with the miles helper."""
        a = Point(lat=40.0, lng=-111.0)
        b = Point(lat=40.001, lng=-111.0)
        assert distance_meters(a, b) == pytest.approx(111.19, abs=0.5)

    def test_non_finite_rejected(self):
        """Test NaN coordinates raise."""
        with pytest.raises(ValueError):
            haversine_distance(float("nan"), 0, 0, 0)

    def test_conversions(self):
        """Test unit conversions."""
        assert miles_to_feet(1) == 5280
        assert meters_to_miles(1609.344) == pytest.approx(1.0)


class TestRingValidation:
    """Tests for ring validation and coercion."""

    def test_open_ring_closed(self, square):
        """Test an open ring gets its first point appended."""
        ring = validate_ring(square(40.0, -111.0))
        assert len(ring) == 5
        assert ring[0] == ring[-1]

    def test_closed_ring_unchanged(self, square):
        """Test an already closed ring is not closed twice."""
        open_ring = square(40.0, -111.0)
        ring = validate_ring(open_ring + [open_ring[0]])
        assert len(ring) == 5

    def test_two_distinct_points_rejected(self):
        """Test fewer than 3 distinct points raises InvalidPolygon."""
        with pytest.raises(InvalidPolygon) as exc_info:
            validate_ring([(40.0, -111.0), (40.1, -111.0), (40.0, -111.0)])
        assert exc_info.value.point_count == 3

    def test_out_of_range_rejected(self):
        """Test a latitude beyond 90 raises InvalidPolygon."""
        with pytest.raises(InvalidPolygon):
            validate_ring([(40.0, -111.0), (95.0, -111.0), (40.0, -110.0)])

    def test_non_finite_rejected(self):
        """Test an infinite coordinate raises InvalidPolygon."""
        with pytest.raises(InvalidPolygon):
            validate_ring([(40.0, -111.0), (float("inf"), -111.0), (40.0, -110.0)])

    def test_to_point_accepts_mapping(self):
        """Test dict coordinates are coerced."""
        assert to_point({"lat": 1.5, "lng": 2.5}) == Point(lat=1.5, lng=2.5)

    def test_to_point_rejects_garbage(self):
        """Test unreadable input raises ValueError."""
        with pytest.raises(ValueError):
            to_point("not a point")


class TestPolygonArea:
    """Tests for polygon area."""

    def test_area_positive(self, square):
        """Test a small square has a positive area in square miles."""
        area = polygon_area(square(40.0, -111.0, 0.01))
        # 0.01 deg lat ~ 0.69 mi, 0.01 deg lng at 40N ~ 0.53 mi
        assert area == pytest.approx(0.69 * 0.529, rel=0.02)

    def test_winding_independent(self, square):
        """Test reversing the ring gives the same area."""
        ring = square(40.0, -111.0)
        assert polygon_area(ring) == pytest.approx(polygon_area(list(reversed(ring))))

    def test_rotation_independent(self, square):
        """Test starting the ring at a different vertex gives the same area."""
        ring = square(40.0, -111.0)
        rotated = ring[2:] + ring[:2]
        assert polygon_area(ring) == pytest.approx(polygon_area(rotated), rel=1e-12)

    def test_collinear_ring_has_zero_area(self):
        """Test three collinear points enclose nothing."""
        ring = [(40.0, -111.0), (40.1, -111.0), (40.2, -111.0)]
        assert polygon_area(ring) == pytest.approx(0.0, abs=1e-6)


class TestCentroid:
    """Tests for polygon centroid."""

    def test_square_centroid(self, square):
        """Test the centroid of a square is its center."""
        c = polygon_centroid(square(40.0, -111.0, 0.02))
        assert c.lat == pytest.approx(40.01)
        assert c.lng == pytest.approx(-110.99)

    def test_centroid_inside_bounding_box(self):
        """Test the centroid of an irregular ring is within its bounds."""
        ring = [(40.0, -111.0), (40.0, -110.9), (40.05, -110.95), (40.1, -110.9), (40.1, -111.0)]
        c = polygon_centroid(ring)
        box = bounding_box(ring)
        assert box.contains(c)

    def test_collinear_falls_back_to_mean(self):
        """Test a zero-area ring returns the vertex mean."""
        c = polygon_centroid([(40.0, -111.0), (40.1, -111.0), (40.2, -111.0)])
        assert c.lat == pytest.approx(40.1)
        assert c.lng == pytest.approx(-111.0)


class TestPointInPolygon:
    """Tests for ray-casting containment."""

    def test_inside(self, square):
        assert point_in_polygon((40.005, -110.995), square(40.0, -111.0))

    def test_outside(self, square):
        assert not point_in_polygon((40.5, -110.995), square(40.0, -111.0))

    def test_concave_notch(self):
        """Test a point in the notch of a U shape is outside."""
        u_shape = [
            (0.0, 0.0), (0.0, 3.0), (3.0, 3.0), (3.0, 2.0),
            (1.0, 2.0), (1.0, 1.0), (3.0, 1.0), (3.0, 0.0),
        ]
        assert not point_in_polygon((2.0, 1.5), u_shape)
        assert point_in_polygon((2.0, 0.5), u_shape)

    def test_edge_point_is_deterministic(self, square):
        """Test a boundary point gives the same answer every time."""
        ring = square(40.0, -111.0)
        answers = {point_in_polygon((40.0, -110.995), ring) for _ in range(5)}
        assert len(answers) == 1


class TestPolygonsOverlap:
    """Tests for overlap detection."""

    def test_overlapping_squares(self, square):
        a = square(40.0, -111.0, 0.02)
        b = square(40.01, -110.99, 0.02)
        assert polygons_overlap(a, b)
        assert polygons_overlap(b, a)

    def test_disjoint_squares(self, square):
        a = square(40.0, -111.0, 0.01)
        b = square(41.0, -110.0, 0.01)
        assert not polygons_overlap(a, b)

    def test_shared_edge_is_not_overlap(self, square):
        """Test squares that only touch along an edge do not overlap."""
        a = square(40.0, -111.0, 0.5)
        b = square(40.0, -110.5, 0.5)
        assert not polygons_overlap(a, b)

    def test_contained_square_overlaps(self, square):
        outer = square(40.0, -111.0, 0.1)
        inner = square(40.02, -110.98, 0.01)
        assert polygons_overlap(outer, inner)

    def test_self_intersecting_ring(self):
        """Test a bow-tie ring is still compared symmetrically."""
        bow_tie = [(0.0, 0.0), (1.0, 1.0), (1.0, 0.0), (0.0, 1.0)]
        box = [(0.2, 0.4), (0.2, 0.6), (0.8, 0.6), (0.8, 0.4)]
        assert polygons_overlap(bow_tie, box) == polygons_overlap(box, bow_tie)


class TestBearingAndBuffers:
    """Tests for bearing, bounding boxes, buffers and grids."""

    def test_bearing_north_and_east(self):
        origin = Point(lat=40.0, lng=-111.0)
        assert bearing(origin, Point(lat=41.0, lng=-111.0)) == pytest.approx(0.0)
        assert bearing(origin, Point(lat=40.0, lng=-110.0)) == pytest.approx(90.0, abs=1.0)

    def test_bearing_range(self):
        origin = Point(lat=40.0, lng=-111.0)
        west = bearing(origin, Point(lat=40.0, lng=-112.0))
        assert 0 <= west < 360
        assert west == pytest.approx(270.0, abs=1.0)

    def test_bounding_box_empty(self):
        with pytest.raises(ValueError):
            bounding_box([])

    def test_buffer_point_radius(self):
        """Test every buffer vertex sits at the requested radius."""
        center = Point(lat=40.0, lng=-111.0)
        ring = buffer_point(center, 0.25, segments=16)
        assert ring[0] == ring[-1]
        assert len(ring) == 17
        for vertex in ring:
            assert distance(center, vertex) == pytest.approx(0.25, rel=1e-6)

    def test_buffer_point_rejects_bad_radius(self):
        with pytest.raises(ValueError):
            buffer_point(Point(lat=40.0, lng=-111.0), 0)

    def test_find_points_in_radius(self):
        center = Point(lat=40.0, lng=-111.0)
        near = Point(lat=40.001, lng=-111.0)
        far = Point(lat=40.5, lng=-111.0)
        found = find_points_in_radius(center, [far, near], 0.5, key=lambda p: p)
        assert found == [near]

    def test_cluster_points(self):
        points = [
            Point(lat=40.0, lng=-111.0),
            Point(lat=40.0001, lng=-111.0),
            Point(lat=41.0, lng=-111.0),
        ]
        clusters = cluster_points(points, radius_miles=0.1, key=lambda p: p)
        assert [len(c.members) for c in clusters] == [2, 1]

    def test_grid_points_inside(self, square):
        ring = square(40.0, -111.0, 0.01)
        grid = generate_grid_in_polygon(ring, spacing_miles=0.1)
        assert grid
        assert all(point_in_polygon(p, ring) for p in grid)

    def test_simplify_keeps_square(self, square):
        """Test simplification never drops below a usable ring."""
        ring = simplify_ring(square(40.0, -111.0, 0.01), tolerance=1.0)
        assert len(set(ring)) >= 3
        assert math.isfinite(polygon_area(ring))
