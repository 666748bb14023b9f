"""Observation CRUD against the ``observations`` and ``species`` tables.

Species entries live in their own table, keyed by ``observationId``. Two gaps
are kept deliberately:

- ``create_observation`` inserts the parent, then the children. If the child
  insert fails, the parent row stays behind without species; the error is
  raised and nothing is rolled back.
- ``update_observation`` replaces children by deleting all of them and
  inserting the new set; it never diffs.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from kikk.datasources.supabase.client import (
    OBSERVATIONS_TABLE,
    SPECIES_TABLE,
    RemoteStoreError,
    eq,
    owner_filter,
)
from kikk.schemas import Observation, ObservationCreate, SpeciesObservation

if TYPE_CHECKING:
    from kikk.datasources.supabase.client import SupabaseClient

#: Embed children under the key the model expects.
OBSERVATION_SELECT = "*,speciesObservations:species(*)"


# =============================================================================
# Row mapping
# =============================================================================


def _species_rows(
    entries: list[SpeciesObservation], observation_id: str
) -> list[dict[str, Any]]:
    """Child rows for insert: drop row ids, tag the parent, keep/stamp createdAt."""
    now = datetime.now(UTC).isoformat()
    rows = []
    for entry in entries:
        row = entry.model_dump(mode="json", by_alias=True, exclude={"id", "observation_id"})
        row["observationId"] = observation_id
        row["createdAt"] = row.get("createdAt") or now
        rows.append(row)
    return rows


def _parse_observation(
    row: dict[str, Any], species_rows: list[dict[str, Any]] | None = None
) -> Observation:
    """Build an Observation from a parent row (children embedded or passed in)."""
    if species_rows is not None:
        row = {**row, "speciesObservations": species_rows}
    return Observation.model_validate(row)


# =============================================================================
# CRUD
# =============================================================================


def fetch_observations(client: SupabaseClient, user_id: str | None = None) -> list[Observation]:
    """
    Fetch one owner's observations, newest first.

    Without ``user_id`` only unowned (anonymous) rows are returned; the two
    views never mix.
    """
    params = {
        "select": OBSERVATION_SELECT,
        "userId": owner_filter(user_id),
        "order": "createdAt.desc",
    }
    return [_parse_observation(r) for r in client.select(OBSERVATIONS_TABLE, params)]


def create_observation(
    client: SupabaseClient,
    data: ObservationCreate,
    user_id: str | None = None,
) -> Observation:
    """
    Insert an observation and its species entries.

    Raises:
        RemoteStoreError: If either insert fails. A failed child insert leaves
            the parent row in place.
    """
    row = data.model_dump(mode="json", by_alias=True, exclude={"species_observations"})
    row["userId"] = user_id

    inserted = client.insert(OBSERVATIONS_TABLE, [row])
    if not inserted:
        msg = "Failed to insert observation"
        raise RemoteStoreError(msg)
    parent = inserted[0]

    children: list[dict[str, Any]] = []
    if data.species_observations:
        children = client.insert(SPECIES_TABLE, _species_rows(data.species_observations, parent["id"]))

    return _parse_observation(parent, children)


def update_observation(client: SupabaseClient, observation: Observation) -> Observation:
    """
    Update an observation, stamping a fresh ``updatedAt``.

    Ownership and export bookkeeping (``userId``, ``lastExportedAt``,
    ``exportCount``) are never written from here.

    When the record carries ``species_observations`` (records loaded from the
    store always do), all existing children are deleted and the given set is
    inserted. A record built without that field leaves children untouched.

    Raises:
        RemoteStoreError: If any request fails or the id does not exist.
    """
    replace_children = "species_observations" in observation.model_fields_set
    patch = observation.model_dump(
        mode="json",
        by_alias=True,
        exclude={
            "id",
            "user_id",
            "species_observations",
            "created_at",
            "last_exported_at",
            "export_count",
        },
    )
    patch["updatedAt"] = datetime.now(UTC).isoformat()

    updated = client.update(
        OBSERVATIONS_TABLE,
        patch,
        {"id": eq(observation.id)},
        select=OBSERVATION_SELECT,
    )
    if not updated:
        msg = f"No observation with id {observation.id}"
        raise RemoteStoreError(msg, status_code=404)
    parent = updated[0]

    if not replace_children:
        return _parse_observation(parent)

    client.delete(SPECIES_TABLE, {"observationId": eq(observation.id)})
    children: list[dict[str, Any]] = []
    if observation.species_observations:
        children = client.insert(
            SPECIES_TABLE, _species_rows(observation.species_observations, observation.id)
        )
    return _parse_observation(parent, children)


def delete_observation(client: SupabaseClient, observation_id: str) -> None:
    """Delete an observation; its species rows go by the table's cascade."""
    client.delete(OBSERVATIONS_TABLE, {"id": eq(observation_id)})
