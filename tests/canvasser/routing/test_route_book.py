"""
Tests for the Route Book
"""
import pytest

from src.canvasser.exceptions import NotFound
from src.canvasser.ledger.property_ledger import PropertyLedger
from src.canvasser.models.geo import Point
from src.canvasser.models.property import PropertyDraft
from src.canvasser.models.route import OptimizedRoute, RouteStatus
from src.canvasser.routing.optimizer import RouteOptimizer
from src.canvasser.routing.route_book import RouteBook


@pytest.fixture
def ledger(clock):
    return PropertyLedger(clock=clock)


@pytest.fixture
def book(clock):
    return RouteBook(clock=clock)


@pytest.fixture
def optimized(ledger):
    props = [
        ledger.create(PropertyDraft(latitude=40.0 + i * 0.01, longitude=-111.0))
        for i in range(1, 4)
    ]
    return RouteOptimizer().optimize(Point(lat=40.0, lng=-111.0), props)


class TestSave:
    """Tests for saving routes."""

    def test_save_rounds_and_orders(self, book, optimized):
        route = book.save("Morning loop", optimized)

        assert route.id.startswith("route_")
        assert route.status == RouteStatus.PENDING
        assert route.property_ids == optimized.property_ids
        assert route.distance == round(optimized.total_distance, 2)
        assert route.estimated_time == round(optimized.estimated_time)

    def test_blank_name_rejected(self, book, optimized):
        with pytest.raises(ValueError):
            book.save(" ", optimized)

    def test_empty_route(self, book):
        route = book.save("Nothing", OptimizedRoute())
        assert route.property_ids == []
        assert route.distance == 0


class TestActivation:
    """Tests for the single active route."""

    def test_activate_demotes_previous(self, book, optimized):
        first = book.save("First", optimized, activate=True)
        second = book.save("Second", optimized)

        book.activate(second.id)

        assert book.get(first.id).status == RouteStatus.PENDING
        assert book.get(second.id).status == RouteStatus.ACTIVE
        assert book.active().id == second.id
        assert sum(1 for r in book.all() if r.status == RouteStatus.ACTIVE) == 1

    def test_complete(self, book, optimized):
        route = book.save("First", optimized, activate=True)
        book.complete(route.id)

        assert book.get(route.id).status == RouteStatus.COMPLETE
        assert book.active() is None

    def test_load_keeps_one_active(self, book, optimized):
        a = book.save("A", optimized, activate=True)
        b = book.save("B", optimized)
        routes = book.all()
        for route in routes:
            route.status = RouteStatus.ACTIVE

        other = RouteBook()
        other.load(routes)

        statuses = {r.id: r.status for r in other.all()}
        assert list(statuses.values()).count(RouteStatus.ACTIVE) == 1
        assert statuses[a.id] == RouteStatus.ACTIVE
        assert statuses[b.id] == RouteStatus.PENDING

    def test_unknown_route(self, book):
        with pytest.raises(NotFound):
            book.activate("route_missing")
        with pytest.raises(NotFound):
            book.delete("route_missing")


class TestMissingProperties:
    """Tests for routes that outlive their properties."""

    def test_resolve_skips_deleted(self, book, ledger, optimized):
        route = book.save("Loop", optimized)
        deleted = route.property_ids[1]
        ledger.delete(deleted)

        stops = book.resolve(route.id, ledger)

        assert [p.id for p in stops] == [route.property_ids[0], route.property_ids[2]]

    def test_drop_property(self, book, optimized):
        first = book.save("A", optimized)
        second = book.save("B", optimized)
        target = optimized.property_ids[0]

        touched = book.drop_property(target)

        assert sorted(touched) == sorted([first.id, second.id])
        assert target not in book.get(first.id).property_ids
        assert book.drop_property("property_missing") == []
