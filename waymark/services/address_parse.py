"""Recognise point-of-interest searches in free text.

Text such as "hotels in Jaipur" or "airport near Pune" names a category
of POIs and a location. The location part is forward geocoded and the
POI category is then searched inside the resulting area.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True, slots=True)
class PoiPhrase:
    """One tag filter, e.g. ``amenity=restaurant``.

    A value of ``*`` with sign ``=`` only requires the key to exist.
    """

    key: str
    value: str
    sign: str = "="
    ignore_case: bool = False


@dataclass(frozen=True, slots=True)
class PoiAndQuery:
    """Phrases that must all match (logical AND)."""

    phrases: Tuple[PoiPhrase, ...]


@dataclass(frozen=True, slots=True)
class PoiQuery:
    """Alternative AND-queries (logical OR)."""

    queries: Tuple[PoiAndQuery, ...]


def _query(*filters: str) -> PoiQuery:
    """Build a PoiQuery from ``key=value`` filters, one AND-query each."""
    queries = []
    for f in filters:
        key, value = f.split("=", 1)
        queries.append(PoiAndQuery(phrases=(PoiPhrase(key=key, value=value),)))
    return PoiQuery(queries=tuple(queries))


# keyword -> (display name, query); longer keywords are matched first
POI_KEYWORDS: Dict[str, Tuple[str, PoiQuery]] = {
    "airport": ("airport", _query("aeroway=aerodrome")),
    "airports": ("airport", _query("aeroway=aerodrome")),
    "train station": ("train station", _query("railway=station")),
    "railway station": ("train station", _query("railway=station")),
    "station": ("train station", _query("railway=station")),
    "bus station": ("bus station", _query("amenity=bus_station")),
    "bus stand": ("bus station", _query("amenity=bus_station")),
    "taxi": ("taxi stand", _query("amenity=taxi")),
    "hotel": ("hotel", _query("tourism=hotel")),
    "hotels": ("hotel", _query("tourism=hotel")),
    "restaurant": ("restaurant", _query("amenity=restaurant")),
    "restaurants": ("restaurant", _query("amenity=restaurant")),
    "cafe": ("cafe", _query("amenity=cafe")),
    "hospital": ("hospital", _query("amenity=hospital")),
    "pharmacy": ("pharmacy", _query("amenity=pharmacy")),
    "atm": ("atm", _query("amenity=atm")),
    "parking": ("parking", _query("amenity=parking")),
    "petrol pump": ("fuel", _query("amenity=fuel")),
    "gas station": ("fuel", _query("amenity=fuel")),
    "fuel": ("fuel", _query("amenity=fuel")),
    "museum": ("museum", _query("tourism=museum")),
    "supermarket": ("supermarket", _query("shop=supermarket")),
    "tourist attractions": ("tourist attraction", _query("tourism=attraction")),
}

_FILLER_WORDS = frozenset({"in", "near", "around", "at", "of"})


def _canonicalize(text: str) -> str:
    """Normalize text for matching (remove accents/punctuation)."""
    normalized = unicodedata.normalize("NFD", text)
    normalized = "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")
    normalized = normalized.lower()
    normalized = re.sub(r"[^a-z0-9]+", " ", normalized)
    return normalized.strip()


@dataclass(frozen=True, slots=True)
class AddressParseResult:
    """Split of a free-text query into location and POI parts.

    Attributes:
        location: Remaining text to forward geocode (may be empty)
        poi: Display name of the recognised POI category ("" if none)
        query: Tag filters for the POI search, None when no POI matched
    """

    location: str
    poi: str = ""
    query: Optional[PoiQuery] = None

    def has_pois(self) -> bool:
        return self.query is not None

    def text(self) -> str:
        if not self.has_pois():
            return self.location
        return f"{self.poi} in {self.location}" if self.location else self.poi

    @classmethod
    def parse(cls, text: str) -> AddressParseResult:
        canonical = _canonicalize(text)
        for keyword in sorted(POI_KEYWORDS, key=len, reverse=True):
            match = re.search(r"\b{}\b".format(re.escape(keyword)), canonical)
            if not match:
                continue
            rest = (canonical[: match.start()] + " " + canonical[match.end() :]).split()
            location: List[str] = [w for w in rest if w not in _FILLER_WORDS]
            poi, query = POI_KEYWORDS[keyword]
            return cls(location=" ".join(location), poi=poi, query=query)
        return cls(location=text.strip())

