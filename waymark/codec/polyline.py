"""Polyline codec.

Coordinates are stored as per-axis deltas, each delta zig-zag encoded and
written as a little-endian sequence of 5-bit chunks. Every chunk is
offset by 63 to land in printable ASCII; bit 0x20 marks a continuation.

Axis order inside the string is (lat, lon[, elevation]); the decoded
output is (lon, lat[, elevation]) so it can be used as GeoJSON positions.
Elevation always uses a fixed multiplier of 100.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..domain.errors import CodecError

ELEVATION_MULTIPLIER = 100
DEFAULT_MULTIPLIER = 1e5


def _read_varint(encoded: str, index: int) -> Tuple[int, int]:
    """Read one zig-zag varint starting at ``index``.

    Returns:
        The decoded signed delta and the index after it.

    Raises:
        CodecError: If the string ends before a terminating chunk.
    """
    result = 0
    shift = 0
    length = len(encoded)
    while True:
        if index >= length:
            raise CodecError(
                "Unterminated value in polyline",
                position=index,
            )
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode(
    encoded: str,
    is_3d: bool = False,
    multiplier: float = DEFAULT_MULTIPLIER,
) -> List[Tuple[float, ...]]:
    """Decode a polyline string into (lon, lat[, elevation]) tuples.

    Args:
        encoded: The encoded polyline.
        is_3d: Whether every point carries an elevation value.
        multiplier: Scale of the lat/lon integers (1e5 or 1e6 usually).

    Returns:
        The decoded coordinate sequence.

    Raises:
        CodecError: If the string is truncated mid-value.
    """
    coordinates: List[Tuple[float, ...]] = []
    index = 0
    lat = 0
    lon = 0
    ele = 0

    while index < len(encoded):
        d_lat, index = _read_varint(encoded, index)
        lat += d_lat
        d_lon, index = _read_varint(encoded, index)
        lon += d_lon

        if is_3d:
            d_ele, index = _read_varint(encoded, index)
            ele += d_ele
            coordinates.append(
                (lon / multiplier, lat / multiplier, ele / ELEVATION_MULTIPLIER)
            )
        else:
            coordinates.append((lon / multiplier, lat / multiplier))

    return coordinates


def _write_varint(value: int, out: List[str]) -> None:
    value = ~(value << 1) if value < 0 else value << 1
    while value >= 0x20:
        out.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5
    out.append(chr(value + 63))


def encode(
    coordinates: Iterable[Sequence[float]],
    is_3d: bool = False,
    multiplier: float = DEFAULT_MULTIPLIER,
) -> str:
    """Encode (lon, lat[, elevation]) positions into a polyline string.

    Values are rounded to the nearest 1/multiplier (elevation 1/100), so
    ``decode(encode(seq)) == seq`` holds for sequences already rounded
    to that precision.
    """
    out: List[str] = []
    prev_lat = 0
    prev_lon = 0
    prev_ele = 0

    for position in coordinates:
        lat = int(round(position[1] * multiplier))
        lon = int(round(position[0] * multiplier))
        _write_varint(lat - prev_lat, out)
        _write_varint(lon - prev_lon, out)
        prev_lat, prev_lon = lat, lon

        if is_3d:
            ele = int(round((position[2] if len(position) > 2 else 0.0) * ELEVATION_MULTIPLIER))
            _write_varint(ele - prev_ele, out)
            prev_ele = ele

    return "".join(out)
