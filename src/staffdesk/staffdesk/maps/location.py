from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def as_text(self) -> str:
        return format_location(self.lat, self.lng)


def _valid(lat: float, lng: float) -> bool:
    return all(math.isfinite(v) for v in (lat, lng)) and -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def format_location(lat: float, lng: float) -> str:
    """Storage format for a coordinate pair: ``"<lat>, <lng>"`` with 6 decimals."""
    return f"{lat:.6f}, {lng:.6f}"


def parse_location(text: Optional[str]) -> Optional[Coordinates]:
    """Parse ``"<lat>, <lng>"``; anything unusable yields ``None``."""

    if not text:
        return None
    parts = [p.strip() for p in str(text).split(",")]
    if len(parts) != 2:
        return None
    try:
        lat, lng = float(parts[0]), float(parts[1])
    except ValueError:
        return None
    if not _valid(lat, lng):
        return None
    return Coordinates(lat=lat, lng=lng)


def location_from_form(lat: Optional[str], lng: Optional[str]) -> Optional[str]:
    """Normalise browser-supplied coordinates.

    A denied or timed-out geolocation request posts empty fields; the caller
    then proceeds without a location instead of failing.
    """

    if not (lat or "").strip() or not (lng or "").strip():
        return None
    coords = parse_location(f"{lat},{lng}")
    return coords.as_text() if coords else None
