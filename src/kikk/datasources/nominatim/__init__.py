"""OpenStreetMap Nominatim data source (reverse geocoding).

Public API:
  - reverse: reverse_geocode, NOMINATIM_API
"""

from kikk.datasources.nominatim.reverse import NOMINATIM_API, reverse_geocode

__all__ = ["NOMINATIM_API", "reverse_geocode"]
