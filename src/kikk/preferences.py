"""Persisted UI preferences: map base layer and colour theme."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kikk.schemas import MapLayer, Theme

if TYPE_CHECKING:
    from kikk.store import KeyValueStore

logger = logging.getLogger(__name__)

MAP_LAYER_KEY = "kikk-map-layer"
THEME_KEY = "kikk-theme"


class Preferences:
    """Reads and writes preferences through the key-value store.

    Unknown or missing stored values fall back to the defaults
    (``topo`` and ``system``).
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    @property
    def map_layer(self) -> MapLayer:
        stored = self.kv.read(MAP_LAYER_KEY)
        try:
            return MapLayer(stored)
        except ValueError:
            if stored is not None:
                logger.warning("Ignoring unknown map layer %r", stored)
            return MapLayer.TOPO

    @map_layer.setter
    def map_layer(self, layer: MapLayer | str) -> None:
        self.kv.write(MAP_LAYER_KEY, MapLayer(layer).value)

    @property
    def theme(self) -> Theme:
        stored = self.kv.read(THEME_KEY)
        try:
            return Theme(stored)
        except ValueError:
            if stored is not None:
                logger.warning("Ignoring unknown theme %r", stored)
            return Theme.SYSTEM

    @theme.setter
    def theme(self, theme: Theme | str) -> None:
        self.kv.write(THEME_KEY, Theme(theme).value)
