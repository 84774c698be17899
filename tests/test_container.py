"""End-to-end wiring tests: URL in, itinerary out, over a mock transport."""

import httpx
import pytest

from waymark.__main__ import format_duration, format_path
from waymark.adapters.navigation import InMemoryHistory
from waymark.adapters.routing import SegmentedRoutesAdapter
from waymark.config import ApiConfig, AppConfig, GeocodingConfig
from waymark.container import AppContext
from waymark.domain.errors import ConfigurationError
from waymark.domain.models import TransportMode

ROUTES = {
    "success": True,
    "data": {
        "routes": [
            {
                "summary": "Flight, Cab",
                "travelDuration": 95,
                "distance": 160,
                "pathId": "p1",
                "segments": [
                    {
                        "mode": "flights",
                        "from": "BOM",
                        "to": "PNQ",
                        "time": 65,
                        "distance": 150,
                        "source": {"geo": {"lat": 19.09, "lng": 72.87}},
                        "destination": {"geo": {"lat": 18.58, "lng": 73.92}},
                    },
                    {
                        "mode": "cab",
                        "from": "PNQ",
                        "to": "Pune",
                        "time": 30,
                        "distance": 10,
                        "points": [[73.92, 18.58], [73.85, 18.52]],
                    },
                ],
            }
        ]
    },
}

SHARE_URL = str(
    httpx.URL(
        "http://localhost:3000/",
        params=[
            ("point", "19.076,72.8777_Mumbai"),
            ("point", "18.5204,73.8567_Pune"),
            ("source_id", "MUM"),
            ("source_sid", "12"),
            ("dest_id", "PNQ"),
            ("dest_sid", "34"),
        ],
    )
)


def routes_handler(request):
    if request.url.path.endswith("/routes"):
        return httpx.Response(200, json=ROUTES)
    return httpx.Response(404, json={"message": "not found"})


@pytest.mark.asyncio
async def test_share_url_to_itinerary():
    client = httpx.AsyncClient(transport=httpx.MockTransport(routes_handler))
    context = AppContext.create_default(
        AppConfig(), navigation=InMemoryHistory(SHARE_URL), http_client=client
    )

    await context.url_sync.update_state_from_url()
    context.url_sync.start()
    await context.gateway.wait_for_pending()

    selected = context.route_store.state.selected_path
    assert selected.path_id == "p1"
    assert [s.mode for s in selected.segments] == [TransportMode.FLIGHT, TransportMode.CAB]
    assert context.error_store.state.is_dismissed

    links = context.selected_access_links()
    assert len(links) == 2
    assert all(len(link) == 21 for link in links)
    assert links[0][-1] == (72.87, 19.09)

    params = httpx.URL(context.url_sync.create_url_from_state()).params
    assert params.get_list("point") == ["19.076,72.8777_Mumbai", "18.5204,73.8567_Pune"]
    assert params["source_id"] == "MUM"

    await context.aclose()
    # a client passed in is left open for its owner
    assert not client.is_closed
    await client.aclose()


@pytest.mark.asyncio
async def test_backend_failure_reaches_error_store():
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(503))
    )
    context = AppContext.create_default(
        AppConfig(), navigation=InMemoryHistory(SHARE_URL), http_client=client
    )

    await context.url_sync.update_state_from_url()
    await context.gateway.wait_for_pending()

    assert not context.error_store.state.is_dismissed
    assert "503" in context.error_store.state.last_error
    assert context.route_store.state.selected_path.is_empty
    await context.aclose()
    await client.aclose()


def test_nominatim_cannot_feed_segmented_backend():
    config = AppConfig(geocoding=GeocodingConfig(provider="nominatim"))

    with pytest.raises(ConfigurationError) as exc_info:
        AppContext.create_default(config)

    assert exc_info.value.setting_name == "geocoding.provider"


@pytest.mark.parametrize(
    "millis,text",
    [(0, "0 min"), (45 * 60_000, "45 min"), (95 * 60_000, "1 h 35 min"), (89_000, "1 min")],
)
def test_format_duration(millis, text):
    assert format_duration(millis) == text


def test_format_path_lists_segments():
    adapter = SegmentedRoutesAdapter(client=None, config=ApiConfig())
    path = adapter.parse_route(ROUTES["data"]["routes"][0])

    lines = format_path(path)

    assert lines[0] == "Flight, Cab: 160.0 km, 1 h 35 min"
    assert lines[1].split() == ["Flight", "BOM", "->", "PNQ", "150.0", "km", "1", "h", "5", "min"]
    assert lines[2].split()[0] == "Cab"


@pytest.mark.asyncio
async def test_autocomplete_uses_location_search():
    def handler(request):
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": [
                    {"id": "MUM", "sid": 12, "name": "Mumbai", "geo": {"lat": 19.07, "lng": 72.87}},
                    {"id": "MUM", "sid": 12, "name": "Mumbai", "geo": {"lat": 19.07, "lng": 72.87}},
                ],
            },
        )

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = AppConfig(geocoding=GeocodingConfig(debounce_seconds=0.0))
    context = AppContext.create_default(config, http_client=client)
    received = []

    autocomplete = context.create_autocomplete(lambda query, hits: received.append((query, hits)))
    autocomplete.request("Mum")
    await autocomplete.wait()

    ((query, hits),) = received
    assert query == "Mum"
    assert [h.location_ref.id for h in hits] == ["MUM"]
    await context.aclose()
    await client.aclose()
