"""Two-way sync between application state and the address bar.

State changes are serialised into the URL: a replace entry when syncing
starts, a push entry for every change after that. Navigating back or
forward parses the URL into the same actions the UI would dispatch.

While the URL is being applied to the stores, ``ignore_updates`` is set
so the resulting state changes do not push new history entries, which
would otherwise loop parse -> state -> serialise -> navigate -> parse.

URL parameters:
    point            repeated, ``<lat>,<lng>`` optionally followed by
                     ``_<text>``; an empty value keeps an unset slot
    profile          routing profile (``vehicle`` is accepted on input)
    layer            selected map layer
    pathDisplayMode  ``static`` when not the default (``status`` is
                     accepted on input)
    source_id, source_sid, source_type, dest_id, dest_sid, dest_type
                     location references of the first and last point
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import math
from typing import List, Optional, Set, Tuple

import httpx

from ..domain.actions import (
    ClearPoints,
    SelectMapLayer,
    SetBBox,
    SetQueryPoints,
    SetVehicleProfile,
    UpdateSettings,
)
from ..domain.models import (
    Coordinate,
    LocationRef,
    QueryPoint,
    QueryPointType,
    coordinate_to_text,
)
from ..geometry.geo import bbox_around, bbox_of_points
from ..ports.navigation import NavigationPort
from ..stores.dispatcher import Dispatcher
from ..stores.map_options_store import MapOptionsState, MapOptionsStore
from ..stores.query_store import QueryStore, QueryStoreState
from ..stores.settings_store import PathDisplayMode, Settings, SettingsStore
from .address_parse import AddressParseResult
from .gateway import RoutingGateway


def point_to_param(point: QueryPoint) -> str:
    coordinate = coordinate_to_text(point.coordinate)
    if point.query_text == coordinate:
        return coordinate
    return f"{coordinate}_{point.query_text}"


def create_url(
    base_url: str,
    query_state: QueryStoreState,
    map_state: MapOptionsState,
    settings: Settings,
) -> str:
    """Serialise the relevant parts of the state into a shareable URL."""
    params: List[Tuple[str, str]] = []
    points = query_state.query_points
    if any(p.is_initialized for p in points):
        params += [("point", point_to_param(p) if p.is_initialized else "") for p in points]

    params.append(("profile", query_state.routing_profile))
    params.append(("layer", map_state.selected_layer))
    if settings.path_display_mode != PathDisplayMode.DYNAMIC:
        params.append(("pathDisplayMode", settings.path_display_mode.value))

    for prefix, point_type in (("source", QueryPointType.FROM), ("dest", QueryPointType.TO)):
        point = query_state.point_of_type(point_type)
        if point is not None and point.location_ref is not None:
            ref = point.location_ref
            params += [
                (f"{prefix}_id", ref.id),
                (f"{prefix}_sid", str(ref.sid)),
                (f"{prefix}_type", str(ref.type)),
            ]

    return str(httpx.URL(base_url).copy_with(params=params))


def parse_coordinate(text: str) -> Optional[Coordinate]:
    """Parse ``lat,lng``; None if it is not exactly two finite numbers."""
    parts = text.split(",")
    if len(parts) != 2:
        return None
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return Coordinate(lat=lat, lng=lng)


def _location_ref(url: httpx.URL, prefix: str, name: str) -> Optional[LocationRef]:
    ref_id = url.params.get(f"{prefix}_id")
    sid = url.params.get(f"{prefix}_sid")
    if not ref_id or not sid:
        return None
    try:
        return LocationRef(
            id=ref_id,
            sid=int(sid),
            type=int(url.params.get(f"{prefix}_type") or 1),
            name=name,
        )
    except ValueError:
        return None


def parse_points(url: httpx.URL) -> List[QueryPoint]:
    points: List[QueryPoint] = []
    values = url.params.get_list("point")
    for index, value in enumerate(values):
        head, sep, text = value.partition("_")
        coordinate = parse_coordinate(head)
        if coordinate is None:
            point = QueryPoint(id=index, query_text=value)
        else:
            point = QueryPoint(
                id=index,
                coordinate=coordinate,
                query_text=text if sep else coordinate_to_text(coordinate),
                is_initialized=True,
            )
        if index == 0:
            point_type = QueryPointType.FROM
        elif index == len(values) - 1:
            point_type = QueryPointType.TO
        else:
            point_type = QueryPointType.VIA
        points.append(dataclasses.replace(point, type=point_type))

    if len(points) >= 2:
        source = _location_ref(url, "source", points[0].query_text)
        if source is not None:
            points[0] = dataclasses.replace(points[0], location_ref=source)
        dest = _location_ref(url, "dest", points[-1].query_text)
        if dest is not None:
            points[-1] = dataclasses.replace(points[-1], location_ref=dest)
    return points


def parse_profile(url: httpx.URL) -> str:
    return url.params.get("profile") or url.params.get("vehicle") or ""


def parse_layer(url: httpx.URL) -> Optional[str]:
    return url.params.get("layer") or None


def parse_path_display_mode(url: httpx.URL) -> Optional[PathDisplayMode]:
    if url.params.get("pathDisplayMode") in ("status", "static"):
        return PathDisplayMode.STATIC
    return None


class URLStateSync:
    """Keeps the address bar and the stores in step.

    Every URL parse gets a generation number when it starts. A parse
    that is overtaken by a newer navigation while it awaits geocoding
    dispatches nothing. The guard counts running parses, so it stays
    raised until the last of them has finished.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        query_store: QueryStore,
        map_store: MapOptionsStore,
        settings_store: SettingsStore,
        navigation: NavigationPort,
        gateway: RoutingGateway,
    ) -> None:
        self._dispatcher = dispatcher
        self._query_store = query_store
        self._map_store = map_store
        self._settings_store = settings_store
        self._navigation = navigation
        self._gateway = gateway
        self._running_parses = 0
        self._generation = 0
        self._started = False
        self._tasks: Set[asyncio.Task[None]] = set()
        self._logger = logging.getLogger(__name__)
        navigation.on_pop_state(self._on_pop_state)

    @property
    def ignore_updates(self) -> bool:
        return self._running_parses > 0

    def create_url_from_state(self) -> str:
        return create_url(
            self._navigation.href,
            self._query_store.state,
            self._map_store.state,
            self._settings_store.state,
        )

    def start(self) -> None:
        """Replace the current entry with the state and follow state changes."""
        if self._started:
            return
        self._started = True
        self._navigation.replace_state(self.create_url_from_state())
        self._query_store.register(self.update_url_from_state)
        self._map_store.register(self.update_url_from_state)
        self._settings_store.register(self.update_url_from_state)

    def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        self._query_store.deregister(self.update_url_from_state)
        self._map_store.deregister(self.update_url_from_state)
        self._settings_store.deregister(self.update_url_from_state)

    def update_url_from_state(self) -> None:
        if self.ignore_updates:
            return
        new_href = self.create_url_from_state()
        if new_href != self._navigation.href:
            self._navigation.push_state(new_href)

    async def update_state_from_url(self) -> None:
        """Apply the current URL to the stores as one batch of actions."""
        href, generation = self._begin_parse()
        await self._apply_url(href, generation)

    async def wait_for_pending(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _begin_parse(self) -> Tuple[str, int]:
        self._running_parses += 1
        self._generation += 1
        return self._navigation.href, self._generation

    def _on_pop_state(self) -> None:
        # raised here, before any other callback can observe a state change
        href, generation = self._begin_parse()
        task = asyncio.get_running_loop().create_task(self._apply_url(href, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _apply_url(self, href: str, generation: int) -> None:
        try:
            url = httpx.URL(href)
            points = parse_points(url)
            if any(not p.is_initialized and p.query_text for p in points):
                points = list(await asyncio.gather(*(self._resolve(p) for p in points)))

            if generation != self._generation:
                self._logger.info(
                    "Dropping URL of a superseded navigation",
                    extra={"generation": generation, "latest": self._generation},
                )
                return

            self._dispatcher.dispatch(ClearPoints())
            profile = parse_profile(url)
            if profile:
                # points were just cleared, so this does not trigger routing
                self._dispatcher.dispatch(SetVehicleProfile(profile))

            display_mode = parse_path_display_mode(url)
            if display_mode is not None:
                self._dispatcher.dispatch(
                    UpdateSettings({"path_display_mode": display_mode})
                )

            self._dispatch_query_points(points)

            layer = parse_layer(url)
            if layer:
                self._dispatcher.dispatch(SelectMapLayer(layer))

            if self._started:
                # the entry now describes the applied state
                self._navigation.replace_state(self.create_url_from_state())
        finally:
            self._running_parses -= 1

    def _dispatch_query_points(self, points: List[QueryPoint]) -> None:
        # set the viewport from the points before the route arrives
        initialized = [p.coordinate for p in points if p.is_initialized]
        if len(initialized) == 1:
            bbox = bbox_around(initialized[0])
        else:
            bbox = bbox_of_points(initialized)
        if bbox is not None:
            self._dispatcher.dispatch(SetBBox(bbox))
        self._dispatcher.dispatch(SetQueryPoints(tuple(points)))

    async def _resolve(self, point: QueryPoint) -> QueryPoint:
        """Geocode a text-only point; on any failure return it unchanged."""
        if point.is_initialized or not point.query_text:
            return point

        try:
            parsed = AddressParseResult.parse(point.query_text)
            if parsed.has_pois() and parsed.location:
                # locate the area first, then search the POIs inside it
                hits = await self._gateway.geocode(parsed.location)
                if not hits:
                    return point
                pois = await self._gateway.reverse_geocode(parsed.query, hits[0].extent)
                if not pois:
                    return point
                return dataclasses.replace(
                    point,
                    coordinate=pois[0].point,
                    query_text=pois[0].name or parsed.text(),
                    is_initialized=True,
                )

            hits = await self._gateway.geocode(point.query_text)
            if not hits:
                return point
            hit = hits[0]
            return dataclasses.replace(
                point,
                coordinate=hit.point,
                query_text=hit.name,
                is_initialized=True,
                location_ref=point.location_ref or hit.location_ref,
            )
        except Exception as e:
            self._logger.warning(
                "Could not resolve point from URL",
                extra={"query": point.query_text, "error": str(e)},
            )
            return point
