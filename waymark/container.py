"""Application context - explicit wiring of the client.

There is no global instance: ``AppContext.create_default`` builds the
dispatcher, the stores, the adapters and the services once, and callers
pass the context (or the parts they need) around.

Design principles:
1. No magic - every collaborator is constructed here, in one place
2. Testable - ports can be replaced before the services are built
3. One HTTP client - shared by all adapters and closed by ``aclose``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import httpx

from .config import AppConfig, get_config
from .domain.errors import ConfigurationError
from .geometry.access_links import access_links
from .geometry.segmentation import SegmentationEngine, SegmentationPolicy
from .ports.geocoding import GeocoderPort
from .ports.navigation import NavigationPort
from .ports.poi import PoiSearchPort
from .ports.routing import RoutingPort
from .services.gateway import RoutingGateway
from .services.geocoder import DebouncedGeocoder, HitsCallback
from .services.url_sync import URLStateSync
from .stores.dispatcher import Dispatcher
from .stores.error_store import ErrorStore
from .stores.map_options_store import MapOptionsStore
from .stores.query_store import QueryStore
from .stores.route_store import RouteStore
from .stores.settings_store import SettingsStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a running client needs, wired together.

    Usage:
        # Production
        context = AppContext.create_default(navigation=InMemoryHistory(url))
        await context.url_sync.update_state_from_url()
        context.url_sync.start()
        await context.gateway.wait_for_pending()
        print(context.route_store.state.selected_path)
        await context.aclose()

        # Testing
        context = AppContext.create_default(config, http_client=client_with_mock_transport)

    Attributes:
        config: Application configuration
        http_client: Shared async HTTP client
        dispatcher: Action bus all stores are registered on
        gateway: Routing/geocoding entry point
        url_sync: Address bar synchronisation
    """

    config: AppConfig
    http_client: httpx.AsyncClient
    dispatcher: Dispatcher
    query_store: QueryStore
    route_store: RouteStore
    settings_store: SettingsStore
    map_options_store: MapOptionsStore
    error_store: ErrorStore
    gateway: RoutingGateway
    url_sync: URLStateSync
    segmentation: SegmentationEngine
    _owns_client: bool = field(default=True, repr=False)

    @classmethod
    def create_default(
        cls,
        config: Optional[AppConfig] = None,
        navigation: Optional[NavigationPort] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> AppContext:
        """Create a context with the production adapters.

        Args:
            config: Optional configuration override.
            navigation: Browser history; defaults to an in-memory history
                starting at ``config.navigation.base_url``.
            http_client: Optional client override (e.g. with a mock
                transport). A client passed in is not closed by aclose().

        Returns:
            A fully wired AppContext.
        """
        from .adapters.geocoding import LocationSearchAdapter, NominatimGeocoderAdapter
        from .adapters.navigation import InMemoryHistory
        from .adapters.poi import OverpassPoiAdapter
        from .adapters.routing import PolylineRoutesAdapter, SegmentedRoutesAdapter

        config = config or get_config()
        if config.geocoding.provider == "nominatim" and config.api.backend == "segmented":
            raise ConfigurationError(
                "The segmented routes backend needs location references, "
                "which the nominatim geocoder does not provide",
                setting_name="geocoding.provider",
            )
        owns_client = http_client is None
        client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.api.timeout_seconds)
        )
        navigation = navigation or InMemoryHistory(config.navigation.base_url)

        seg = config.segmentation
        segmentation = SegmentationEngine(
            SegmentationPolicy(flight_km=seg.flight_km, train_km=seg.train_km, bus_km=seg.bus_km)
        )

        # Routing backend based on config
        routing: RoutingPort
        if config.api.backend == "polyline":
            routing = PolylineRoutesAdapter(client, config.api, segmentation)
        else:
            routing = SegmentedRoutesAdapter(client, config.api)

        # Geocoding provider based on config
        geocoder: GeocoderPort
        if config.geocoding.provider == "nominatim":
            geocoder = NominatimGeocoderAdapter(config.geocoding)
        else:
            geocoder = LocationSearchAdapter(client, config.api, config.geocoding)

        poi_search: PoiSearchPort = OverpassPoiAdapter(client, config.api)

        dispatcher = Dispatcher()
        gateway = RoutingGateway(dispatcher, routing, geocoder, poi_search)

        query_store = QueryStore(
            router=gateway,
            profile=config.navigation.default_profile,
            max_alternatives=config.api.max_alternatives,
        )
        route_store = RouteStore()
        settings_store = SettingsStore()
        map_options_store = MapOptionsStore(
            config.navigation.layers, config.navigation.default_layer
        )
        error_store = ErrorStore()
        for store in (query_store, route_store, settings_store, map_options_store, error_store):
            dispatcher.register(store)

        url_sync = URLStateSync(
            dispatcher,
            query_store,
            map_options_store,
            settings_store,
            navigation,
            gateway,
        )

        logger.debug(
            "Application context created",
            extra={
                "backend": config.api.backend,
                "geocoder": config.geocoding.provider,
            },
        )

        return cls(
            config=config,
            http_client=client,
            dispatcher=dispatcher,
            query_store=query_store,
            route_store=route_store,
            settings_store=settings_store,
            map_options_store=map_options_store,
            error_store=error_store,
            gateway=gateway,
            url_sync=url_sync,
            segmentation=segmentation,
            _owns_client=owns_client,
        )

    def selected_access_links(self) -> List[List[Tuple[float, float]]]:
        """Access links from the query points to the selected itinerary."""
        return access_links(
            self.route_store.state.selected_path,
            self.query_store.state.query_points,
            self.config.segmentation.access_link_steps,
        )

    def create_autocomplete(self, on_hits: HitsCallback) -> DebouncedGeocoder:
        """Create a debounced geocoder for one input field."""
        return DebouncedGeocoder(
            self.gateway,
            on_hits,
            debounce_seconds=self.config.geocoding.debounce_seconds,
            min_query_length=self.config.geocoding.min_query_length,
        )

    async def aclose(self) -> None:
        """Wait for pending work and release the HTTP client."""
        self.url_sync.stop()
        await self.gateway.wait_for_pending()
        if self._owns_client:
            await self.http_client.aclose()
