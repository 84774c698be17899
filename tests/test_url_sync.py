"""Tests for address bar <-> state synchronisation."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from waymark.adapters.navigation import InMemoryHistory
from waymark.domain.actions import SelectMapLayer, SetQueryPoints, UpdateSettings
from waymark.domain.errors import NetworkError
from waymark.domain.models import (
    Coordinate,
    GeocodingHit,
    LocationRef,
    PoiHit,
    QueryPoint,
    SegmentedRoutingResult,
)
from waymark.services.gateway import RoutingGateway
from waymark.services.url_sync import (
    URLStateSync,
    create_url,
    parse_coordinate,
    parse_path_display_mode,
    parse_points,
    parse_profile,
)
from waymark.stores import (
    Dispatcher,
    MapOptionsStore,
    PathDisplayMode,
    QueryStore,
    RouteStore,
    SettingsStore,
)

BASE = "http://localhost:3000/"
LAYERS = ["Omniscale", "OpenStreetMap"]


def url(*params):
    return str(httpx.URL(BASE, params=list(params)))


class EmptyRouting:
    requires_location_refs = False

    def __init__(self):
        self.calls = []

    async def route(self, args):
        self.calls.append(args)
        return SegmentedRoutingResult()


class FakeGeocoder:
    def __init__(self, hits_by_query=None, failing=()):
        self.hits_by_query = hits_by_query or {}
        self.failing = set(failing)
        self.queries = []

    async def geocode(self, query, bias=None):
        self.queries.append(query)
        if query in self.failing:
            raise NetworkError("Could not reach the server")
        return self.hits_by_query.get(query, [])


class GatedGeocoder(FakeGeocoder):
    """Geocoder that holds every lookup until the test opens the gate."""

    def __init__(self, hits_by_query=None):
        super().__init__(hits_by_query)
        self.gate = asyncio.Event()

    async def geocode(self, query, bias=None):
        await self.gate.wait()
        return await super().geocode(query, bias)


class ControlledRouting:
    requires_location_refs = False

    def __init__(self):
        self.pending = []

    async def route(self, args):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


class FakePoiSearch:
    def __init__(self, hits):
        self.hits = hits
        self.searches = []

    async def search(self, query, bbox):
        self.searches.append((query, bbox))
        return list(self.hits)


def city_hit(name, lat, lng, ref_id):
    point = Coordinate(lat, lng)
    return GeocodingHit(
        id=ref_id,
        point=point,
        extent=(lng - 0.05, lat - 0.05, lng + 0.05, lat + 0.05),
        name=name,
        location_ref=LocationRef(ref_id, 1, 1, name),
    )


class App:
    def __init__(self, href, geocoder=None, poi_search=None, routing=None):
        self.dispatcher = Dispatcher()
        self.routing = routing or EmptyRouting()
        self.gateway = RoutingGateway(
            self.dispatcher, self.routing, geocoder or FakeGeocoder(), poi_search
        )
        self.query_store = QueryStore(router=self.gateway)
        self.route_store = RouteStore()
        self.map_store = MapOptionsStore(LAYERS, "Omniscale")
        self.settings_store = SettingsStore()
        for store in (self.query_store, self.route_store, self.map_store, self.settings_store):
            self.dispatcher.register(store)
        self.history = InMemoryHistory(href)
        self.sync = URLStateSync(
            self.dispatcher,
            self.query_store,
            self.map_store,
            self.settings_store,
            self.history,
            self.gateway,
        )


# --- parsing helpers ---


@pytest.mark.parametrize("text", ["abc", "1,2,3", "nan,1", "19.0", ""])
def test_parse_coordinate_rejects_invalid(text):
    assert parse_coordinate(text) is None


def test_parse_coordinate():
    assert parse_coordinate("19.076,72.8777") == Coordinate(19.076, 72.8777)


def test_parse_points_text_and_legacy_values():
    points = parse_points(
        httpx.URL(
            url(
                ("point", "19.076,72.8777_Chhatrapati_Shivaji"),
                ("point", ""),
                ("point", "Pune"),
            )
        )
    )

    assert points[0].is_initialized
    assert points[0].query_text == "Chhatrapati_Shivaji"
    assert not points[1].is_initialized
    assert points[1].query_text == ""
    assert not points[2].is_initialized
    assert points[2].query_text == "Pune"
    assert [p.type.value for p in points] == ["from", "via", "to"]


def test_parse_points_without_text_uses_coordinate_text():
    (point,) = parse_points(httpx.URL(url(("point", "19.0760,72.8777"))))

    assert point.query_text == "19.076,72.8777"


def test_parse_location_refs_default_type():
    points = parse_points(
        httpx.URL(
            url(
                ("point", "19.076,72.8777_Mumbai"),
                ("point", "18.5204,73.8567_Pune"),
                ("source_id", "MUM"),
                ("source_sid", "12"),
                ("dest_id", "PNQ"),
                ("dest_sid", "34"),
                ("dest_type", "2"),
            )
        )
    )

    assert points[0].location_ref == LocationRef("MUM", 12, 1, "Mumbai")
    assert points[1].location_ref == LocationRef("PNQ", 34, 2, "Pune")


def test_parse_profile_and_display_mode():
    assert parse_profile(httpx.URL(url(("vehicle", "bike")))) == "bike"
    assert parse_profile(httpx.URL(url(("profile", "foot"), ("vehicle", "bike")))) == "foot"
    assert parse_profile(httpx.URL(BASE)) == ""
    assert parse_path_display_mode(httpx.URL(url(("pathDisplayMode", "status")))) == (
        PathDisplayMode.STATIC
    )
    assert parse_path_display_mode(httpx.URL(url(("pathDisplayMode", "dynamic")))) is None


# --- serialisation ---


@pytest.mark.asyncio
async def test_create_url_roundtrip():
    app = App(BASE)
    points = (
        QueryPoint(
            id=0,
            coordinate=Coordinate(19.076, 72.8777),
            query_text="Mumbai",
            is_initialized=True,
            location_ref=LocationRef("MUM", 12, 1, "Mumbai"),
        ),
        QueryPoint(
            id=1,
            coordinate=Coordinate(18.5204, 73.8567),
            query_text="18.5204,73.8567",
            is_initialized=True,
            location_ref=LocationRef("PNQ", 34, 1, "18.5204,73.8567"),
        ),
    )
    app.dispatcher.dispatch(SetQueryPoints(points))
    app.dispatcher.dispatch(SelectMapLayer("OpenStreetMap"))
    app.dispatcher.dispatch(UpdateSettings({"path_display_mode": "static"}))

    href = create_url(
        BASE, app.query_store.state, app.map_store.state, app.settings_store.state
    )
    parsed = httpx.URL(href)

    assert parsed.params.get_list("point") == ["19.076,72.8777_Mumbai", "18.5204,73.8567"]
    assert parsed.params["layer"] == "OpenStreetMap"
    assert parsed.params["profile"] == "car"
    assert parsed.params["pathDisplayMode"] == "static"

    def key(p):
        return (p.coordinate, p.query_text, p.is_initialized, p.location_ref, p.type)

    assert [key(p) for p in parse_points(parsed)] == [key(p) for p in app.query_store.state.query_points]
    await app.gateway.wait_for_pending()


def test_create_url_omits_points_when_none_initialized():
    app = App(BASE)

    href = create_url(BASE, app.query_store.state, app.map_store.state, app.settings_store.state)

    params = httpx.URL(href).params
    assert "point" not in params
    assert "pathDisplayMode" not in params
    assert params["layer"] == "Omniscale"


# --- navigation ---


@pytest.mark.asyncio
async def test_update_state_from_url_applies_everything():
    href = url(
        ("point", "19.076,72.8777_Mumbai"),
        ("point", "18.5204,73.8567_Pune"),
        ("profile", "bike"),
        ("layer", "OpenStreetMap"),
        ("pathDisplayMode", "status"),
        ("source_id", "MUM"),
        ("source_sid", "12"),
        ("dest_id", "PNQ"),
        ("dest_sid", "34"),
    )
    app = App(href)

    await app.sync.update_state_from_url()
    await app.gateway.wait_for_pending()

    state = app.query_store.state
    assert [p.query_text for p in state.query_points] == ["Mumbai", "Pune"]
    assert all(p.is_initialized for p in state.query_points)
    assert state.routing_profile == "bike"
    assert state.query_points[0].location_ref.id == "MUM"
    assert app.map_store.state.selected_layer == "OpenStreetMap"
    assert app.map_store.state.bbox is not None
    assert app.settings_store.state.path_display_mode == PathDisplayMode.STATIC
    # one route request for the complete set of points
    assert len(app.routing.calls) == 1
    assert app.routing.calls[0].profile == "bike"


@pytest.mark.asyncio
async def test_guard_is_raised_while_applying_url():
    app = App(BASE)
    app.sync.start()
    app.history.push_state(url(("point", "19.076,72.8777"), ("point", "18.5204,73.8567")))
    seen = []
    app.query_store.register(lambda: seen.append(app.sync.ignore_updates))

    await app.sync.update_state_from_url()

    assert seen and all(seen)
    assert not app.sync.ignore_updates
    # applying the URL pushed nothing
    assert len(app.history.entries) == 2
    assert app.query_store.state.is_complete
    await app.gateway.wait_for_pending()



def test_start_replaces_then_state_changes_push():
    app = App(BASE)

    app.sync.start()
    assert len(app.history.entries) == 1
    first = app.history.href
    assert httpx.URL(first).params["layer"] == "Omniscale"

    app.dispatcher.dispatch(SelectMapLayer("OpenStreetMap"))
    assert len(app.history.entries) == 2
    assert httpx.URL(app.history.href).params["layer"] == "OpenStreetMap"

    # unchanged URL pushes nothing
    app.dispatcher.dispatch(SelectMapLayer("OpenStreetMap"))
    app.dispatcher.dispatch(UpdateSettings({"show_animations": True}))
    assert len(app.history.entries) == 2


@pytest.mark.asyncio
async def test_legacy_text_points_are_geocoded():
    geocoder = FakeGeocoder(
        {
            "Mumbai": [city_hit("Mumbai", 19.076, 72.8777, "MUM")],
            "Pune": [city_hit("Pune", 18.5204, 73.8567, "PNQ")],
        }
    )
    app = App(url(("point", "Mumbai"), ("point", "Pune")), geocoder=geocoder)

    await app.sync.update_state_from_url()
    await app.gateway.wait_for_pending()

    points = app.query_store.state.query_points
    assert all(p.is_initialized for p in points)
    assert points[0].coordinate == Coordinate(19.076, 72.8777)
    assert points[1].location_ref.id == "PNQ"
    assert len(app.routing.calls) == 1


@pytest.mark.asyncio
async def test_failed_point_stays_unresolved():
    geocoder = FakeGeocoder(
        {"Pune": [city_hit("Pune", 18.5204, 73.8567, "PNQ")]},
        failing={"Atlantis"},
    )
    app = App(url(("point", "Atlantis"), ("point", "Pune")), geocoder=geocoder)

    await app.sync.update_state_from_url()

    first, second = app.query_store.state.query_points
    assert not first.is_initialized
    assert first.query_text == "Atlantis"
    assert second.is_initialized
    assert app.routing.calls == []
    assert not app.sync.ignore_updates


@pytest.mark.asyncio
async def test_poi_point_uses_two_stage_search():
    geocoder = FakeGeocoder({"goa": [city_hit("Goa", 15.4909, 73.8278, "GOI")]})
    poi_search = FakePoiSearch(
        [PoiHit(id=42, point=Coordinate(15.5, 73.83), tags={"name": "Taj Fort Aguada"})]
    )
    app = App(
        url(("point", "hotels in Goa"), ("point", "15.3,74.1")),
        geocoder=geocoder,
        poi_search=poi_search,
    )

    await app.sync.update_state_from_url()
    await app.gateway.wait_for_pending()

    first = app.query_store.state.query_points[0]
    assert first.is_initialized
    assert first.coordinate == Coordinate(15.5, 73.83)
    assert first.query_text == "Taj Fort Aguada"
    ((query, bbox),) = poi_search.searches
    assert query.queries[0].phrases[0].key == "tourism"
    assert bbox == pytest.approx((73.7778, 15.4409, 73.8778, 15.5409))


@pytest.mark.asyncio
async def test_back_navigation_reapplies_previous_url():
    first = url(("point", "19.076,72.8777_Mumbai"), ("point", "18.5204,73.8567_Pune"))
    app = App(first)
    await app.sync.update_state_from_url()
    app.sync.start()

    app.history.push_state(url(("point", "28.6139,77.209_Delhi"), ("point", "26.9124,75.7873_Jaipur")))
    app.history.back()
    await app.sync.wait_for_pending()
    await app.gateway.wait_for_pending()

    texts = [p.query_text for p in app.query_store.state.query_points]
    assert texts == ["Mumbai", "Pune"]


async def spin(turns=5):
    for _ in range(turns):
        await asyncio.sleep(0)


def texts_of(app):
    return [p.query_text for p in app.query_store.state.query_points]


CITIES = {
    "Mumbai": [city_hit("Mumbai", 19.076, 72.8777, "MUM")],
    "Pune": [city_hit("Pune", 18.5204, 73.8567, "PNQ")],
}


@pytest.mark.asyncio
async def test_back_while_route_pending_keeps_forward_entry():
    geocoder = GatedGeocoder(CITIES)
    routing = ControlledRouting()
    app = App(BASE, geocoder=geocoder, routing=routing)
    app.sync.start()
    text_only = url(("point", "Mumbai"), ("point", "Pune"))
    app.history.push_state(text_only)
    app.history.push_state(
        url(("point", "28.6139,77.209_Delhi"), ("point", "26.9124,75.7873_Jaipur"))
    )
    await app.sync.update_state_from_url()
    await spin()
    assert len(routing.pending) == 1
    forward_entry = app.history.href

    app.history.back()
    assert app.sync.ignore_updates

    # the route of the page being left arrives while the parse awaits geocoding
    routing.pending[0].set_result(SegmentedRoutingResult())
    await app.gateway.wait_for_pending()

    assert app.history.href == text_only
    assert app.history.entries[-1] == forward_entry
    assert len(app.history.entries) == 3
    assert app.sync.ignore_updates

    geocoder.gate.set()
    await app.sync.wait_for_pending()
    await spin()

    assert texts_of(app) == ["Mumbai", "Pune"]
    assert not app.sync.ignore_updates
    assert len(routing.pending) == 2
    routing.pending[1].set_result(SegmentedRoutingResult())
    await app.gateway.wait_for_pending()
    assert len(app.history.entries) == 3
    assert app.history.entries[-1] == forward_entry


@pytest.mark.asyncio
async def test_newer_navigation_wins_over_slower_parse():
    geocoder = GatedGeocoder(CITIES)
    routing = ControlledRouting()
    app = App(BASE, geocoder=geocoder, routing=routing)
    app.sync.start()
    app.history.push_state(url(("point", "Mumbai"), ("point", "Pune")))
    coordinates = url(("point", "28.6139,77.209_Delhi"), ("point", "26.9124,75.7873_Jaipur"))
    app.history.push_state(coordinates)

    app.history.back()
    await spin()
    app.history.forward()
    await spin()

    # the newer URL is applied while the older parse still awaits geocoding
    assert texts_of(app) == ["Delhi", "Jaipur"]
    assert app.sync.ignore_updates
    assert len(routing.pending) == 1
    routing.pending[0].set_result(SegmentedRoutingResult())
    await app.gateway.wait_for_pending()
    assert len(app.history.entries) == 3

    geocoder.gate.set()
    await app.sync.wait_for_pending()
    await spin()

    assert texts_of(app) == ["Delhi", "Jaipur"]
    assert not app.sync.ignore_updates
    assert len(routing.pending) == 1
    assert len(app.history.entries) == 3
    assert httpx.URL(app.history.href).params.get_list("point") == [
        "28.6139,77.209_Delhi",
        "26.9124,75.7873_Jaipur",
    ]
