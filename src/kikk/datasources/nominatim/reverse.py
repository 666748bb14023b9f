"""Reverse geocoding: coordinates -> a short human-readable place name.

Uses the OpenStreetMap Nominatim ``/reverse`` endpoint. The usage policy
requires an identifying User-Agent, which the shared session sends.
Lookups are best-effort: any failure yields ``None``.

Usage policy: https://operations.osmfoundation.org/policies/nominatim/
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from kikk.services.http import session

logger = logging.getLogger(__name__)

NOMINATIM_API = "https://nominatim.openstreetmap.org"

# Most specific first.
_ADDRESS_KEYS = (
    "hamlet",
    "village",
    "neighbourhood",
    "suburb",
    "town",
    "city_district",
    "city",
    "municipality",
    "county",
)


def _place_name(data: dict[str, Any]) -> str | None:
    name = data.get("name")
    if name:
        return str(name)
    address: dict[str, Any] = data.get("address") or {}
    for key in _ADDRESS_KEYS:
        if address.get(key):
            return str(address[key])
    display = data.get("display_name")
    if display:
        return str(display).split(",")[0].strip() or None
    return None


def reverse_geocode(lat: float, lng: float, *, api_base: str = NOMINATIM_API) -> str | None:
    """
    Look up a place name for a point.

    Returns:
        The most specific named place, or None if nothing was found or the
        request failed.
    """
    params = {"lat": lat, "lon": lng, "format": "json", "accept-language": "no"}
    try:
        resp = session.get(f"{api_base.rstrip('/')}/reverse", params=params)
        resp.raise_for_status()
        data: dict[str, Any] = resp.json()
    except (requests.RequestException, ValueError) as exc:
        logger.warning("Reverse geocoding failed for (%s, %s): %s", lat, lng, exc)
        return None

    if "error" in data:
        return None
    return _place_name(data)
