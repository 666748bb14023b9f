"""Saved-location CRUD against the ``user_locations`` table.

The table uses snake_case columns with the point flattened into ``lat``/``lng``;
rows are mapped to and from ``UserLocation`` here.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from kikk.datasources.supabase.client import (
    LOCATIONS_TABLE,
    RemoteStoreError,
    eq,
    owner_filter,
)
from kikk.schemas import LatLng, UserLocation, UserLocationCreate

if TYPE_CHECKING:
    from kikk.datasources.supabase.client import SupabaseClient


def _parse_location_row(row: dict[str, Any]) -> UserLocation:
    return UserLocation(
        id=row["id"],
        user_id=row.get("user_id"),
        name=row["name"],
        location=LatLng(lat=row["lat"], lng=row["lng"]),
        uncertainty_radius=row["uncertainty_radius"],
        description=row.get("description"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _location_row(location: UserLocationCreate) -> dict[str, Any]:
    return {
        "name": location.name,
        "lat": location.location.lat,
        "lng": location.location.lng,
        "uncertainty_radius": location.uncertainty_radius,
        "description": location.description,
    }


def fetch_user_locations(client: SupabaseClient, user_id: str | None = None) -> list[UserLocation]:
    """Fetch one owner's saved locations (or the unowned ones), newest first."""
    params = {
        "select": "*",
        "user_id": owner_filter(user_id),
        "order": "created_at.desc",
    }
    return [_parse_location_row(r) for r in client.select(LOCATIONS_TABLE, params)]


def create_user_location(
    client: SupabaseClient,
    location: UserLocationCreate,
    user_id: str | None = None,
) -> UserLocation:
    row = {**_location_row(location), "user_id": user_id}
    inserted = client.insert(LOCATIONS_TABLE, [row])
    if not inserted:
        msg = "Failed to insert user location"
        raise RemoteStoreError(msg)
    return _parse_location_row(inserted[0])


def update_user_location(client: SupabaseClient, location: UserLocation) -> UserLocation:
    """Update name, point, radius and description; stamps ``updated_at``."""
    values = {**_location_row(location), "updated_at": datetime.now(UTC).isoformat()}
    updated = client.update(LOCATIONS_TABLE, values, {"id": eq(location.id)})
    if not updated:
        msg = f"No user location with id {location.id}"
        raise RemoteStoreError(msg, status_code=404)
    return _parse_location_row(updated[0])


def delete_user_location(client: SupabaseClient, location_id: str) -> None:
    client.delete(LOCATIONS_TABLE, {"id": eq(location_id)})
