from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import urlencode

from ..core.enums import MarkerColor
from .location import Coordinates, parse_location

_MARKER_HEX = {
    MarkerColor.GREEN: "#10b981",
    MarkerColor.BLUE: "#3b82f6",
}


@dataclass(frozen=True)
class MapView:
    """Everything a template needs to draw one pinned location."""

    coordinates: Coordinates
    label: str
    embed_url: str
    link_url: str
    marker_hex: str
    height: int


class MapRenderer(Protocol):
    def render(self, location: Optional[str], marker: MarkerColor, *, label: str = "") -> Optional[MapView]:
        """Return a view for ``location`` or ``None`` when it cannot be placed."""

        raise NotImplementedError


class OpenStreetMapRenderer(MapRenderer):
    """OpenStreetMap embed (iframe) with a marker at the location."""

    EMBED_BASE = "https://www.openstreetmap.org/export/embed.html"
    LINK_BASE = "https://www.openstreetmap.org/"

    def __init__(self, *, zoom: int = 15, span: float = 0.005, height: int = 200):
        self._zoom = int(zoom)
        self._span = float(span)
        self._height = int(height)

    def render(self, location: Optional[str], marker: MarkerColor, *, label: str = "") -> Optional[MapView]:
        coords = parse_location(location)
        if coords is None:
            return None

        bbox = ",".join(
            f"{v:.6f}"
            for v in (
                coords.lng - self._span,
                coords.lat - self._span,
                coords.lng + self._span,
                coords.lat + self._span,
            )
        )
        embed_query = urlencode({"bbox": bbox, "layer": "mapnik", "marker": f"{coords.lat:.6f},{coords.lng:.6f}"})
        link_query = urlencode({"mlat": f"{coords.lat:.6f}", "mlon": f"{coords.lng:.6f}"})
        anchor = f"#map={self._zoom}/{coords.lat:.6f}/{coords.lng:.6f}"

        return MapView(
            coordinates=coords,
            label=label or coords.as_text(),
            embed_url=f"{self.EMBED_BASE}?{embed_query}",
            link_url=f"{self.LINK_BASE}?{link_query}{anchor}",
            marker_hex=_MARKER_HEX.get(MarkerColor(marker), _MARKER_HEX[MarkerColor.GREEN]),
            height=self._height,
        )
