"""Command line entry point.

Opens a share URL headlessly, resolves its points, requests the route
and prints the selected itinerary:

    python -m waymark "http://localhost:3000/?point=19.07,72.87_Mumbai&point=28.61,77.2_Delhi"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional

from .adapters.navigation import InMemoryHistory
from .config import get_config
from .container import AppContext
from .domain.errors import WaymarkError
from .domain.models import SegmentedPath
from .domain.transport import mode_label
from .logging_config import configure_logging


def format_duration(millis: float) -> str:
    minutes = int(round(millis / 60_000))
    hours, minutes = divmod(minutes, 60)
    return f"{hours} h {minutes} min" if hours else f"{minutes} min"


def format_path(path: SegmentedPath) -> List[str]:
    lines = [
        f"{path.summary or 'Route'}: {path.total_distance / 1000:.1f} km, "
        f"{format_duration(path.total_time)}"
    ]
    if path.price is not None:
        lines[0] += f", {path.price.amount:g} {path.price.currency}".rstrip()
    for segment in path.segments:
        lines.append(
            f"  {mode_label(segment.mode):<6} {segment.from_ref} -> {segment.to_ref}"
            f"  {segment.distance_meters / 1000:.1f} km  {format_duration(segment.time_millis)}"
        )
    return lines


async def run(url: str) -> int:
    context = AppContext.create_default(navigation=InMemoryHistory(url))
    try:
        await context.url_sync.update_state_from_url()
        context.url_sync.start()
        await context.gateway.wait_for_pending()

        errors = context.error_store.state
        if not errors.is_dismissed:
            print(f"Routing failed: {errors.last_error}", file=sys.stderr)
            return 1

        route = context.route_store.state
        if route.selected_path.is_empty:
            unresolved = [
                p.query_text for p in context.query_store.state.query_points if not p.is_initialized
            ]
            if unresolved:
                print(f"Could not resolve: {', '.join(unresolved)}", file=sys.stderr)
            else:
                print("No route found", file=sys.stderr)
            return 1

        for path in route.all_paths:
            marker = "*" if path is route.selected_path else " "
            lines = format_path(path)
            print(f"{marker} {lines[0]}")
            for line in lines[1:]:
                print(line)
        print(context.url_sync.create_url_from_state())
        return 0
    finally:
        await context.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="waymark", description=__doc__.splitlines()[0])
    parser.add_argument("url", help="share URL with point=<lat>,<lng>[_<text>] parameters")
    args = parser.parse_args(argv)

    configure_logging(get_config().observability)
    try:
        return asyncio.run(run(args.url))
    except WaymarkError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
