"""Transport mode helpers."""

from __future__ import annotations

from typing import Dict, Optional

from .models import TransportMode

_MODE_ALIASES: Dict[str, TransportMode] = {
    "FLIGHTS": TransportMode.FLIGHT,
    "FLIGHT": TransportMode.FLIGHT,
    "RAILS": TransportMode.TRAIN,
    "RAIL": TransportMode.TRAIN,
    "TRAIN": TransportMode.TRAIN,
    "BUS": TransportMode.BUS,
    "CAB": TransportMode.CAB,
    "TAXI": TransportMode.CAB,
}

MODE_LABELS: Dict[TransportMode, str] = {
    TransportMode.FLIGHT: "Flight",
    TransportMode.TRAIN: "Train",
    TransportMode.BUS: "Bus",
    TransportMode.CAB: "Cab",
}


def normalize_mode(raw: Optional[str]) -> Optional[TransportMode]:
    """Map a backend mode name (any case, singular or plural) to a TransportMode.

    Returns None for unknown or missing modes.
    """
    if not raw:
        return None
    return _MODE_ALIASES.get(raw.strip().upper())


def mode_label(mode: TransportMode) -> str:
    return MODE_LABELS[mode]
