"""
Tests for the Territory Registry
"""
import pytest

from src.canvasser.exceptions import InvalidPolygon, NotFound
from src.canvasser.ledger.property_ledger import PropertyLedger
from src.canvasser.models.geo import Point
from src.canvasser.models.property import PropertyDraft, PropertyStatus
from src.canvasser.territories.registry import TerritoryRegistry


@pytest.fixture
def registry(clock):
    return TerritoryRegistry(palette=["#111111", "#222222"], clock=clock)


class TestCreate:
    """Tests for TerritoryRegistry.create."""

    def test_create_closes_ring_and_computes_geometry(self, registry, square):
        territory = registry.create("North Side", square(40.0, -111.0, 0.02))

        assert territory.id.startswith("territory_")
        assert territory.name == "North Side"
        assert territory.ring[0] == territory.ring[-1]
        assert len(territory.ring) == 5
        assert territory.area > 0
        assert territory.centroid.lat == pytest.approx(40.01)
        assert territory.centroid.lng == pytest.approx(-110.99)
        assert territory.overlaps == []

    def test_palette_rotates(self, registry, square):
        first = registry.create("A", square(40.0, -111.0))
        second = registry.create("B", square(41.0, -111.0))
        third = registry.create("C", square(42.0, -111.0))
        explicit = registry.create("D", square(43.0, -111.0), color="#abcdef")

        assert [first.color, second.color, third.color] == ["#111111", "#222222", "#111111"]
        assert explicit.color == "#abcdef"

    def test_degenerate_ring_rejected(self, registry):
        with pytest.raises(InvalidPolygon):
            registry.create("Line", [(40.0, -111.0), (40.1, -111.0)])
        assert registry.all() == []

    def test_blank_name_rejected(self, registry, square):
        with pytest.raises(ValueError):
            registry.create("  ", square(40.0, -111.0))


class TestOverlaps:
    """Tests for symmetric overlap bookkeeping."""

    def test_overlap_is_symmetric(self, registry, square):
        a = registry.create("A", square(40.0, -111.0, 0.02))
        b = registry.create("B", square(40.01, -110.99, 0.02))

        assert registry.get(a.id).overlaps == [b.id]
        assert registry.get(b.id).overlaps == [a.id]

    def test_disjoint_territories_do_not_overlap(self, registry, square):
        a = registry.create("A", square(0.0, 0.0, 10.0))
        b = registry.create("B", square(0.0, 100.0, 10.0))

        assert registry.get(a.id).overlaps == []
        assert registry.get(b.id).overlaps == []
        assert registry.find_overlapping(a.id) == []

    def test_update_moves_overlap(self, registry, square):
        """Test redrawing a ring away clears both sides of the overlap."""
        a = registry.create("A", square(40.0, -111.0, 0.02))
        b = registry.create("B", square(40.01, -110.99, 0.02))

        moved = registry.update(b.id, square(45.0, -111.0, 0.02))

        assert moved.overlaps == []
        assert registry.get(a.id).overlaps == []
        assert moved.centroid.lat == pytest.approx(45.01)

    def test_update_invalid_ring_leaves_territory(self, registry, square):
        a = registry.create("A", square(40.0, -111.0))
        with pytest.raises(InvalidPolygon):
            registry.update(a.id, [(40.0, -111.0)])
        assert registry.get(a.id).ring == a.ring

    def test_delete_scrubs_overlaps(self, registry, square):
        a = registry.create("A", square(40.0, -111.0, 0.02))
        b = registry.create("B", square(40.01, -110.99, 0.02))

        registry.delete(b.id)

        assert registry.get(a.id).overlaps == []
        with pytest.raises(NotFound):
            registry.get(b.id)

    def test_find_overlapping_rechecks_live(self, registry, square):
        """Test a stale cached overlap set is corrected on lookup."""
        a = registry.create("A", square(40.0, -111.0, 0.02))
        b = registry.create("B", square(40.01, -110.99, 0.02))
        # Corrupt the cache directly
        registry._territories[a.id].overlaps = []

        overlapping = registry.find_overlapping(a.id)

        assert [t.id for t in overlapping] == [b.id]
        assert registry.get(a.id).overlaps == [b.id]


class TestQueries:
    """Tests for lookups and statistics."""

    def test_locate_oldest_first(self, registry, square, clock):
        outer = registry.create("Outer", square(40.0, -111.0, 0.1))
        clock.advance(minutes=1)
        inner = registry.create("Inner", square(40.02, -110.98, 0.01))

        found = registry.locate(Point(lat=40.025, lng=-110.975))

        assert [t.id for t in found] == [outer.id, inner.id]
        assert registry.locate(Point(lat=50.0, lng=-111.0)) == []

    def test_rename_and_reps(self, registry, square):
        a = registry.create("A", square(40.0, -111.0))
        registry.rename(a.id, "Renamed")
        registry.assign_reps(a.id, ["rep_1", "rep_2", "rep_1"])

        stored = registry.get(a.id)
        assert stored.name == "Renamed"
        assert stored.assigned_reps == ["rep_1", "rep_2"]
        assert [t.id for t in registry.reps_territories("rep_2")] == [a.id]

    def test_stats(self, registry, square, clock):
        territory = registry.create("A", square(40.0, -111.0))
        ledger = PropertyLedger(clock=clock)

        ids = [
            ledger.create(PropertyDraft(latitude=40.005, longitude=-110.995, territory_id=territory.id)).id
            for _ in range(4)
        ]
        ledger.set_status(ids[0], PropertyStatus.SOLD)
        ledger.set_status(ids[1], PropertyStatus.INTERESTED)
        ledger.set_status(ids[2], PropertyStatus.DO_NOT_CONTACT)

        stats = registry.stats(territory.id, ledger)

        assert stats.total_properties == 4
        assert stats.contacted == 3
        assert stats.sold == 1
        assert stats.interested == 1
        assert stats.dnc == 1
        assert stats.conversion_rate == pytest.approx(1 / 3)

    def test_stats_empty_territory(self, registry, square):
        territory = registry.create("A", square(40.0, -111.0))
        stats = registry.stats(territory.id, PropertyLedger())

        assert stats.total_properties == 0
        assert stats.conversion_rate == 0.0

    def test_stats_unknown_territory(self, registry):
        with pytest.raises(NotFound):
            registry.stats("territory_missing", PropertyLedger())
