"""Local-only entity collections.

Used when no hosted datastore is configured. Each collection is loaded once
from its key-value blob when constructed, kept in memory in insertion order,
and written back in full after every mutation. A lock serializes each change
with its write, as stores call these from worker threads. Ids are random
UUIDs and timestamps are stamped here rather than by a server.
"""

from __future__ import annotations

import threading
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from kikk.schemas import (
    Observation,
    ObservationCreate,
    SpeciesObservation,
    UserLocation,
    UserLocationCreate,
)

if TYPE_CHECKING:
    from kikk.store import KeyValueStore

OBSERVATIONS_KEY = "kikk_observations"
LOCATIONS_KEY = "kikk_user_locations"

RecordT = TypeVar("RecordT", bound=BaseModel)


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class _LocalCollection(Generic[RecordT]):
    """In-memory list of records mirrored to one blob."""

    key: str
    model: type[RecordT]

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv
        stored = kv.read(self.key) or []
        self._records: list[RecordT] = [self.model.model_validate(r) for r in stored]
        self._lock = threading.Lock()

    def fetch(self) -> list[RecordT]:
        """Return all records in insertion order."""
        with self._lock:
            return list(self._records)

    def get(self, record_id: str) -> RecordT | None:
        return next((r for r in self._records if r.id == record_id), None)  # type: ignore[attr-defined]

    def delete(self, record_id: str) -> None:
        """Remove a record. Unknown ids are ignored."""
        with self._lock:
            self._records = [r for r in self._records if r.id != record_id]  # type: ignore[attr-defined]
            self._persist()

    def _append(self, record: RecordT) -> RecordT:
        with self._lock:
            self._records.append(record)
            self._persist()
        return record

    def _replace(self, record: RecordT) -> RecordT:
        with self._lock:
            for i, existing in enumerate(self._records):
                if existing.id == record.id:  # type: ignore[attr-defined]
                    self._records[i] = record
                    self._persist()
                    return record
        raise KeyError(record.id)  # type: ignore[attr-defined]

    def _persist(self) -> None:
        payload: list[dict[str, Any]] = [
            r.model_dump(mode="json", by_alias=True) for r in self._records
        ]
        self.kv.write(self.key, payload)


def _stamp_species(
    entries: list[SpeciesObservation], observation_id: str, now: datetime
) -> list[SpeciesObservation]:
    """Give child entries fresh ids tied to their parent (delete-then-insert)."""
    return [
        s.model_copy(
            update={
                "id": _new_id(),
                "observation_id": observation_id,
                "created_at": s.created_at or now,
            }
        )
        for s in entries
    ]


class LocalObservations(_LocalCollection[Observation]):
    """Observations kept under ``kikk_observations``."""

    key = OBSERVATIONS_KEY
    model = Observation

    def create(self, data: ObservationCreate) -> Observation:
        now = _now()
        observation_id = _new_id()
        observation = Observation(
            **data.model_dump(exclude={"species_observations"}),
            id=observation_id,
            species_observations=_stamp_species(data.species_observations, observation_id, now),
            created_at=now,
            updated_at=now,
        )
        return self._append(observation)

    def update(self, observation: Observation) -> Observation:
        """Replace a stored observation, stamping ``updated_at``.

        Species entries are replaced wholesale when the record carries them;
        a record built without ``species_observations`` keeps the stored ones.

        Raises:
            KeyError: If no observation has this id.
        """
        existing = self.get(observation.id)
        if existing is None:
            raise KeyError(observation.id)
        now = _now()
        changes: dict[str, Any] = {"updated_at": now, "created_at": existing.created_at}
        if "species_observations" in observation.model_fields_set:
            changes["species_observations"] = _stamp_species(
                observation.species_observations, observation.id, now
            )
        else:
            changes["species_observations"] = existing.species_observations
        return self._replace(observation.model_copy(update=changes))


class LocalLocations(_LocalCollection[UserLocation]):
    """Saved locations kept under ``kikk_user_locations``."""

    key = LOCATIONS_KEY
    model = UserLocation

    def create(self, data: UserLocationCreate) -> UserLocation:
        now = _now()
        location = UserLocation(
            **data.model_dump(),
            id=_new_id(),
            created_at=now,
            updated_at=now,
        )
        return self._append(location)

    def update(self, location: UserLocation) -> UserLocation:
        """Replace a stored location, stamping ``updated_at``.

        Raises:
            KeyError: If no location has this id.
        """
        existing = self.get(location.id)
        if existing is None:
            raise KeyError(location.id)
        return self._replace(
            location.model_copy(update={"updated_at": _now(), "created_at": existing.created_at})
        )
