"""
Shared fixtures: sample records and an in-memory stand-in for the datastore.
"""

from __future__ import annotations

import copy
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest

from kikk.config import Settings
from kikk.datasources.supabase.client import RemoteStoreError, SupabaseClient
from kikk.schemas import LatLng, ObservationCreate, SpeciesObservation, TaxonRecord

if TYPE_CHECKING:
    from pathlib import Path

# Artsdatabanken-shaped taxon payloads (the API's own key spellings).
TAXA: dict[str, dict[str, Any]] = {
    "kjottmeis": {
        "Id": 3800,
        "TaxonId": 3800,
        "ValidScientificName": "Parus major",
        "ValidScientificNameId": 3800,
        "PrefferedPopularname": "kjøttmeis",
        "TaxonGroup": "Fugler",
        "TaxonGroupId": 1,
        "Family": "Paridae",
        "Genus": "Parus",
    },
    "blameis": {
        "Id": 3799,
        "TaxonId": 3799,
        "ValidScientificName": "Cyanistes caeruleus",
        "PrefferedPopularname": "blåmeis",
        "TaxonGroup": "Fugler",
    },
    "skjaere": {
        "Id": 3886,
        "TaxonId": 3886,
        "ValidScientificName": "Pica pica",
        "PrefferedPopularname": "skjære",
        "TaxonGroup": "Fugler",
    },
}


def taxon(name: str) -> TaxonRecord:
    return TaxonRecord.model_validate(TAXA[name])


def observation_input(counts: list[int], **overrides: Any) -> ObservationCreate:
    """An ObservationCreate with one species entry per count."""
    names = list(TAXA)
    entries = [
        SpeciesObservation(species=taxon(names[i % len(names)]), count=count)
        for i, count in enumerate(counts)
    ]
    fields: dict[str, Any] = {
        "location": LatLng(lat=59.9139, lng=10.7522),
        "uncertainty_radius": 25,
        "location_name": "Frognerparken",
        "start_date": datetime(2026, 5, 17, 8, 30, tzinfo=UTC),
        "end_date": datetime(2026, 5, 17, 9, 15, tzinfo=UTC),
        "comment": "Morgenrunde",
        "species_observations": entries,
    }
    fields.update(overrides)
    return ObservationCreate(**fields)


# =============================================================================
# In-memory datastore
# =============================================================================

_TIMESTAMP_COLUMNS = {
    "observations": ("createdAt", "updatedAt"),
    "species": ("createdAt",),
    "user_locations": ("created_at", "updated_at"),
    "export_logs": ("createdAt",),
}


def _matches(row: dict[str, Any], column: str, expr: str) -> bool:
    op, _, value = expr.partition(".")
    if op == "eq":
        return str(row.get(column)) == value
    if op == "is" and value == "null":
        return row.get(column) is None
    if op == "in":
        wanted = {v.strip('"') for v in value.strip("()").split(",") if v}
        return str(row.get(column)) in wanted
    raise AssertionError(f"unsupported filter {column}={expr}")


class FakeSupabase(SupabaseClient):
    """SupabaseClient backed by dicts, interpreting the PostgREST params we send.

    ``fail_on`` holds ``(method, table)`` pairs that raise RemoteStoreError,
    e.g. ``("insert", "species")``. ``calls`` records every operation.
    """

    def __init__(self) -> None:
        super().__init__("https://fake.supabase.co", "anon-key")
        self.tables: dict[str, list[dict[str, Any]]] = {name: [] for name in _TIMESTAMP_COLUMNS}
        self.objects: dict[str, bytes] = {}
        self.fail_on: set[tuple[str, str]] = set()
        self.calls: list[tuple[str, str]] = []

    def _check(self, method: str, table: str) -> None:
        self.calls.append((method, table))
        if (method, table) in self.fail_on:
            raise RemoteStoreError(f"{method} on {table} failed", status_code=500)

    def _filtered(self, table: str, filters: dict[str, str]) -> list[dict[str, Any]]:
        rows = self.tables[table]
        for column, expr in filters.items():
            if column in ("select", "order"):
                continue
            rows = [r for r in rows if _matches(r, column, expr)]
        return rows

    def _shape(self, table: str, row: dict[str, Any], select: str | None) -> dict[str, Any]:
        out = copy.deepcopy(row)
        if table == "observations" and select and "speciesObservations:species" in select:
            out["speciesObservations"] = [
                copy.deepcopy(s) for s in self.tables["species"] if s["observationId"] == row["id"]
            ]
        return out

    def select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        self._check("select", table)
        rows = self._filtered(table, params)
        order = params.get("order")
        if order:
            column, _, direction = order.partition(".")
            rows = sorted(rows, key=lambda r: r[column], reverse=direction == "desc")
        return [self._shape(table, r, params.get("select")) for r in rows]

    def insert(
        self, table: str, rows: list[dict[str, Any]], *, select: str | None = None
    ) -> list[dict[str, Any]]:
        self._check("insert", table)
        now = datetime.now(UTC).isoformat()
        stored = []
        for row in rows:
            new = {**copy.deepcopy(row), "id": str(uuid.uuid4())}
            for column in _TIMESTAMP_COLUMNS[table]:
                new[column] = new.get(column) or now
            if table == "observations":
                new.setdefault("exportCount", 0)
            self.tables[table].append(new)
            stored.append(self._shape(table, new, select))
        return stored

    def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: dict[str, str],
        *,
        select: str | None = None,
    ) -> list[dict[str, Any]]:
        self._check("update", table)
        changed = []
        for row in self._filtered(table, filters):
            row.update(copy.deepcopy(values))
            # Mirrors the database trigger that counts exports.
            if table == "observations" and values.get("lastExportedAt"):
                row["exportCount"] = row.get("exportCount", 0) + 1
            changed.append(self._shape(table, row, select))
        return changed

    def delete(self, table: str, filters: dict[str, str]) -> None:
        self._check("delete", table)
        doomed = {r["id"] for r in self._filtered(table, filters)}
        self.tables[table] = [r for r in self.tables[table] if r["id"] not in doomed]
        if table == "observations":
            self.tables["species"] = [
                s for s in self.tables["species"] if s["observationId"] not in doomed
            ]

    def upload(
        self, bucket: str, path: str, content: bytes, *, content_type: str, upsert: bool = False
    ) -> str:
        self._check("upload", bucket)
        key = f"{bucket}/{path}"
        if key in self.objects and not upsert:
            raise RemoteStoreError("The resource already exists", status_code=409)
        self.objects[key] = content
        return path

    def download(self, bucket: str, path: str) -> bytes:
        self._check("download", bucket)
        try:
            return self.objects[f"{bucket}/{path}"]
        except KeyError:
            raise RemoteStoreError("Object not found", status_code=404) from None


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def local_settings(tmp_path: Path) -> Settings:
    """Settings with no datastore configured, storing under tmp_path."""
    return Settings(
        supabase_url="",
        supabase_key="",
        data_dir=tmp_path / "data",
        export_dir=tmp_path / "exports",
        _env_file=None,
    )


@pytest.fixture
def remote_settings(tmp_path: Path) -> Settings:
    return Settings(
        supabase_url="https://fake.supabase.co",
        supabase_key="anon-key",
        data_dir=tmp_path / "data",
        export_dir=tmp_path / "exports",
        _env_file=None,
    )
