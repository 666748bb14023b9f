"""Static map-related constants.

Reference data that doesn't change with API calls: raster tile providers and
the geographic approximations used for distances.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from kikk.reference.geography import METERS_PER_DEGREE as METERS_PER_DEGREE
from kikk.reference.geography import REGEOCODE_THRESHOLD_M as REGEOCODE_THRESHOLD_M
from kikk.reference.tiles import TILE_PROVIDERS as TILE_PROVIDERS
from kikk.reference.tiles import TileProvider as TileProvider
from kikk.reference.tiles import tile_url as tile_url
