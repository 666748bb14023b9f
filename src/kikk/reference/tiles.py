"""Raster tile providers for the map base layers."""

from __future__ import annotations

from dataclasses import dataclass

from kikk.schemas import MapLayer


@dataclass(frozen=True)
class TileProvider:
    """XYZ raster template plus the attribution it requires."""

    url: str
    attribution: str
    needs_token: bool = False


KARTVERKET_TOPO = TileProvider(
    url="https://cache.kartverket.no/v1/wmts/1.0.0/topo/default/webmercator/{z}/{y}/{x}.png",
    attribution='© <a href="https://www.kartverket.no/">Kartverket</a>',
)

MAPBOX_SATELLITE = TileProvider(
    url=(
        "https://api.mapbox.com/styles/v1/mapbox/satellite-v9/tiles/{z}/{x}/{y}"
        "?access_token={token}"
    ),
    attribution="© Mapbox",
    needs_token=True,
)

TILE_PROVIDERS: dict[MapLayer, TileProvider] = {
    MapLayer.TOPO: KARTVERKET_TOPO,
    MapLayer.SATELLITE: MAPBOX_SATELLITE,
}


def tile_url(layer: MapLayer | str, mapbox_token: str = "") -> str:
    """
    Return the tile URL template for a base layer.

    The ``{z}``/``{x}``/``{y}`` placeholders are left for the map widget.

    Raises:
        ValueError: If the layer is unknown, or the satellite layer is asked
            for without a Mapbox token.
    """
    provider = TILE_PROVIDERS[MapLayer(layer)]
    if not provider.needs_token:
        return provider.url
    if not mapbox_token:
        msg = f"Layer {layer!s} requires a Mapbox token"
        raise ValueError(msg)
    return provider.url.replace("{token}", mapbox_token)
