"""Debounced autocomplete geocoding."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from ..domain.models import Coordinate, GeocodingHit
from ..ports.geocoding import GeocoderPort

HitsCallback = Callable[[str, List[GeocodingHit]], None]


def filter_duplicates(hits: List[GeocodingHit]) -> List[GeocodingHit]:
    """Keep the first hit of every id, preserving order."""
    seen = set()
    unique = []
    for hit in hits:
        if hit.id in seen:
            continue
        seen.add(hit.id)
        unique.append(hit)
    return unique


class DebouncedGeocoder:
    """Geocodes the text of an input field while the user types.

    Each request waits ``debounce_seconds`` before it is sent; a newer
    request or ``cancel()`` within that window means it is never sent.
    Responses of superseded requests are dropped when they arrive. Only
    the latest request reports its hits to ``on_hits``.
    """

    def __init__(
        self,
        geocoder: GeocoderPort,
        on_hits: HitsCallback,
        debounce_seconds: float = 0.2,
        min_query_length: int = 2,
    ) -> None:
        self._geocoder = geocoder
        self._on_hits = on_hits
        self._debounce_seconds = debounce_seconds
        self._min_query_length = min_query_length
        self._request_id = 0
        self._last_query: Optional[str] = None
        self._timer: Optional[asyncio.Task[None]] = None
        self._in_flight: Optional[asyncio.Task[None]] = None
        self._logger = logging.getLogger(__name__)

    def request(self, query: str, bias: Optional[Coordinate] = None) -> None:
        if query == self._last_query:
            return
        self._last_query = query

        request_id = self._next_id()
        self._cancel_timer()
        if len(query.strip()) < self._min_query_length:
            return

        self._timer = asyncio.get_running_loop().create_task(
            self._run(request_id, query, bias)
        )

    def cancel(self) -> None:
        self._cancel_timer()
        self._next_id()
        self._last_query = None

    async def wait(self) -> None:
        """Wait for the scheduled and the in-flight request to finish."""
        for task in (self._timer, self._in_flight):
            if task is not None and not task.done():
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _run(
        self, request_id: int, query: str, bias: Optional[Coordinate]
    ) -> None:
        await asyncio.sleep(self._debounce_seconds)
        if request_id != self._request_id:
            return

        # past the debounce window the call is no longer cancelled, only ignored
        task = asyncio.current_task()
        if self._timer is task:
            self._timer = None
        self._in_flight = task

        try:
            hits = filter_duplicates(await self._geocoder.geocode(query, bias))
        except Exception as e:
            self._logger.warning(
                "Autocomplete geocoding failed",
                extra={"query": query, "error": str(e)},
            )
            hits = []

        if request_id != self._request_id:
            self._logger.debug("Dropping stale geocoding response", extra={"query": query})
            return
        self._on_hits(query, hits)
