"""Tests for the routing gateway and its out-of-order response handling."""

from __future__ import annotations

import asyncio
import dataclasses

import pytest

from waymark.domain.actions import RouteRequestFailed, RouteRequestSuccess, SetPoint
from waymark.domain.errors import NetworkError, ValidationError
from waymark.domain.models import (
    Coordinate,
    LocationRef,
    RoutingArgs,
    SegmentedPath,
    SegmentedRoutingResult,
)
from waymark.services.address_parse import AddressParseResult
from waymark.services.gateway import RoutingGateway
from waymark.stores import Dispatcher, ErrorStore, QueryStore, RouteStore


class ControlledRouting:
    """Routing port whose responses are released by the test."""

    def __init__(self, requires_location_refs=False):
        self.requires_location_refs = requires_location_refs
        self.pending = []

    async def route(self, args):
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


class ImmediateRouting:
    requires_location_refs = False

    def __init__(self, result):
        self.result = result

    async def route(self, args):
        return self.result


class NoGeocoder:
    async def geocode(self, query, bias=None):
        return []


class ActionLog:
    def __init__(self):
        self.actions = []

    def receive(self, action):
        self.actions.append(action)


def result(name):
    return SegmentedRoutingResult(
        paths=(SegmentedPath(summary=name, total_time=1.0, total_distance=1.0),)
    )


ARGS = RoutingArgs(points=((72.8, 19.0), (73.8, 18.5)), profile="car")


def make_gateway(routing):
    dispatcher = Dispatcher()
    log = ActionLog()
    dispatcher.register(log)
    return RoutingGateway(dispatcher, routing, NoGeocoder()), log


async def wait_for_calls(routing, count):
    while len(routing.pending) < count:
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_sequence_numbers_increase():
    routing = ControlledRouting()
    gateway, _ = make_gateway(routing)

    assert gateway.route_with_dispatch(ARGS, True) == 0
    assert gateway.route_with_dispatch(ARGS, True) == 1

    await wait_for_calls(routing, 2)
    for future in routing.pending:
        future.set_result(result("x"))
    await gateway.wait_for_pending()


@pytest.mark.asyncio
async def test_later_issued_response_wins_when_it_arrives_first():
    routing = ControlledRouting()
    gateway, log = make_gateway(routing)

    gateway.route_with_dispatch(ARGS, True)
    gateway.route_with_dispatch(ARGS, True)
    await wait_for_calls(routing, 2)

    routing.pending[1].set_result(result("newer"))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    routing.pending[0].set_result(result("older"))
    await gateway.wait_for_pending()

    assert len(log.actions) == 1
    (action,) = log.actions
    assert isinstance(action, RouteRequestSuccess)
    assert action.sequence == 1
    assert action.result.paths[0].summary == "newer"
    assert gateway.last_applied_sequence == 1


@pytest.mark.asyncio
async def test_only_the_newest_of_three_is_applied():
    routing = ControlledRouting()
    gateway, log = make_gateway(routing)

    for _ in range(3):
        gateway.route_with_dispatch(ARGS, True)
    await wait_for_calls(routing, 3)

    for index in (2, 0, 1):
        routing.pending[index].set_result(result(f"r{index}"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
    await gateway.wait_for_pending()

    assert [a.sequence for a in log.actions] == [2]
    assert log.actions[0].result.paths[0].summary == "r2"
    assert gateway.last_applied_sequence == 2


@pytest.mark.asyncio
async def test_responses_in_issue_order_are_all_applied():
    routing = ControlledRouting()
    gateway, log = make_gateway(routing)

    gateway.route_with_dispatch(ARGS, True)
    gateway.route_with_dispatch(ARGS, False)
    await wait_for_calls(routing, 2)

    routing.pending[0].set_result(result("first"))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    routing.pending[1].set_result(result("second"))
    await gateway.wait_for_pending()

    assert [a.sequence for a in log.actions] == [0, 1]
    assert [a.zoom for a in log.actions] == [True, False]


@pytest.mark.asyncio
async def test_stale_failure_is_suppressed():
    routing = ControlledRouting()
    gateway, log = make_gateway(routing)

    gateway.route_with_dispatch(ARGS, True)
    gateway.route_with_dispatch(ARGS, True)
    await wait_for_calls(routing, 2)

    routing.pending[1].set_result(result("newer"))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    routing.pending[0].set_exception(NetworkError("Could not reach the server"))
    await gateway.wait_for_pending()

    assert [type(a) for a in log.actions] == [RouteRequestSuccess]


@pytest.mark.asyncio
async def test_failure_becomes_failed_action():
    routing = ControlledRouting()
    gateway, log = make_gateway(routing)

    gateway.route_with_dispatch(ARGS, True)
    await wait_for_calls(routing, 1)
    routing.pending[0].set_exception(
        NetworkError("Request failed with status 503 Service Unavailable", status_code=503)
    )
    await gateway.wait_for_pending()

    (action,) = log.actions
    assert isinstance(action, RouteRequestFailed)
    assert action.message == "Request failed with status 503 Service Unavailable"
    assert action.sequence == 0


@pytest.mark.asyncio
async def test_unexpected_error_does_not_escape():
    class BrokenRouting:
        requires_location_refs = False

        async def route(self, args):
            raise KeyError("segments")

    gateway, log = make_gateway(BrokenRouting())

    gateway.route_with_dispatch(ARGS, True)
    await gateway.wait_for_pending()

    (action,) = log.actions
    assert isinstance(action, RouteRequestFailed)


@pytest.mark.asyncio
async def test_missing_location_refs_are_rejected():
    routing = ControlledRouting(requires_location_refs=True)
    gateway, log = make_gateway(routing)

    with pytest.raises(ValidationError):
        await gateway.route(ARGS)

    gateway.route_with_dispatch(ARGS, True)
    await gateway.wait_for_pending()

    assert routing.pending == []
    (action,) = log.actions
    assert isinstance(action, RouteRequestFailed)
    assert "location" in action.message


@pytest.mark.asyncio
async def test_location_refs_present_are_accepted():
    routing = ImmediateRouting(result("ok"))
    routing.requires_location_refs = True
    gateway, _ = make_gateway(routing)
    args = RoutingArgs(
        points=ARGS.points,
        profile="car",
        source_ref=LocationRef("MUM", 1),
        dest_ref=LocationRef("PNQ", 2),
    )

    assert (await gateway.route(args)).paths[0].summary == "ok"


@pytest.mark.asyncio
async def test_reverse_geocode_without_poi_backend():
    gateway, _ = make_gateway(ControlledRouting())
    query = AddressParseResult.parse("hotels in Goa").query

    assert await gateway.reverse_geocode(query, (73.0, 15.0, 74.0, 16.0)) == []


@pytest.mark.asyncio
async def test_query_store_route_reaches_route_store():
    dispatcher = Dispatcher()
    gateway = RoutingGateway(dispatcher, ImmediateRouting(result("Cab")), NoGeocoder())
    query_store = QueryStore(router=gateway)
    route_store = RouteStore()
    error_store = ErrorStore()
    for store in (query_store, route_store, error_store):
        dispatcher.register(store)

    for index, (lat, lng) in enumerate([(19.0, 72.8), (18.5, 73.8)]):
        point = query_store.state.query_points[index]
        dispatcher.dispatch(
            SetPoint(
                dataclasses.replace(point, coordinate=Coordinate(lat, lng), is_initialized=True)
            )
        )
    await gateway.wait_for_pending()

    assert route_store.state.selected_path.summary == "Cab"
    assert not query_store.state.current_request.is_pending
    assert error_store.state.is_dismissed
