"""
Entity stores: one interface, a remote and a local implementation.

``build_stores(settings)`` decides once, from the injected settings, whether
the hosted datastore is configured. Remote stores read through the query
cache and invalidate it after every successful mutation; local stores work
on the on-disk blobs. Callers (UI, CLI) only see ``ObservationStore``,
``LocationStore`` and ``ExportService``.

Blocking HTTP and file I/O runs in worker threads via ``asyncio.to_thread``
so the event loop is never blocked.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from kikk.datasources import supabase
from kikk.flows.export import ExportResult, export_observations
from kikk.local import LocalLocations, LocalObservations
from kikk.query import QueryClient
from kikk.store import KeyValueStore

if TYPE_CHECKING:
    from pathlib import Path

    from kikk.config import Settings
    from kikk.schemas import (
        ExportLog,
        Observation,
        ObservationCreate,
        UserLocation,
        UserLocationCreate,
    )

OBSERVATIONS = "observations"
LOCATIONS = "user-locations"
EXPORTS = "exports"


# =============================================================================
# Interfaces
# =============================================================================


class ObservationStore(Protocol):
    async def fetch(self) -> list[Observation]: ...

    async def add(self, data: ObservationCreate) -> Observation: ...

    async def update(self, observation: Observation) -> Observation: ...

    async def delete(self, observation_id: str) -> None: ...


class LocationStore(Protocol):
    async def fetch(self) -> list[UserLocation]: ...

    async def add(self, data: UserLocationCreate) -> UserLocation: ...

    async def update(self, location: UserLocation) -> UserLocation: ...

    async def delete(self, location_id: str) -> None: ...


# =============================================================================
# Remote implementations
# =============================================================================


class RemoteObservationStore:
    """Observations in the hosted datastore, read through the query cache."""

    def __init__(
        self, client: supabase.SupabaseClient, queries: QueryClient, user_id: str | None = None
    ) -> None:
        self.client = client
        self.queries = queries
        self.user_id = user_id

    async def fetch(self) -> list[Observation]:
        observations = await self.queries.fetch_query(
            (OBSERVATIONS, self.user_id),
            lambda: asyncio.to_thread(supabase.fetch_observations, self.client, self.user_id),
        )
        return list(observations)

    async def add(self, data: ObservationCreate) -> Observation:
        created = await asyncio.to_thread(
            supabase.create_observation, self.client, data, self.user_id
        )
        self.queries.invalidate((OBSERVATIONS,))
        return created

    async def update(self, observation: Observation) -> Observation:
        updated = await asyncio.to_thread(supabase.update_observation, self.client, observation)
        self.queries.invalidate((OBSERVATIONS,))
        return updated

    async def delete(self, observation_id: str) -> None:
        await asyncio.to_thread(supabase.delete_observation, self.client, observation_id)
        self.queries.invalidate((OBSERVATIONS,))


class RemoteLocationStore:
    """Saved locations in the hosted datastore, read through the query cache."""

    def __init__(
        self, client: supabase.SupabaseClient, queries: QueryClient, user_id: str | None = None
    ) -> None:
        self.client = client
        self.queries = queries
        self.user_id = user_id

    async def fetch(self) -> list[UserLocation]:
        locations = await self.queries.fetch_query(
            (LOCATIONS, self.user_id),
            lambda: asyncio.to_thread(supabase.fetch_user_locations, self.client, self.user_id),
        )
        return list(locations)

    async def add(self, data: UserLocationCreate) -> UserLocation:
        created = await asyncio.to_thread(
            supabase.create_user_location, self.client, data, self.user_id
        )
        self.queries.invalidate((LOCATIONS,))
        return created

    async def update(self, location: UserLocation) -> UserLocation:
        updated = await asyncio.to_thread(supabase.update_user_location, self.client, location)
        self.queries.invalidate((LOCATIONS,))
        return updated

    async def delete(self, location_id: str) -> None:
        await asyncio.to_thread(supabase.delete_user_location, self.client, location_id)
        self.queries.invalidate((LOCATIONS,))


# =============================================================================
# Local implementations
# =============================================================================


class LocalObservationStore:
    """Observations in the local blob. Order is insertion order."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.collection = LocalObservations(kv)

    async def fetch(self) -> list[Observation]:
        return self.collection.fetch()

    async def add(self, data: ObservationCreate) -> Observation:
        return await asyncio.to_thread(self.collection.create, data)

    async def update(self, observation: Observation) -> Observation:
        return await asyncio.to_thread(self.collection.update, observation)

    async def delete(self, observation_id: str) -> None:
        await asyncio.to_thread(self.collection.delete, observation_id)


class LocalLocationStore:
    """Saved locations in the local blob. Order is insertion order."""

    def __init__(self, kv: KeyValueStore) -> None:
        self.collection = LocalLocations(kv)

    async def fetch(self) -> list[UserLocation]:
        return self.collection.fetch()

    async def add(self, data: UserLocationCreate) -> UserLocation:
        return await asyncio.to_thread(self.collection.create, data)

    async def update(self, location: UserLocation) -> UserLocation:
        return await asyncio.to_thread(self.collection.update, location)

    async def delete(self, location_id: str) -> None:
        await asyncio.to_thread(self.collection.delete, location_id)


# =============================================================================
# Exports
# =============================================================================


class ExportService:
    """Runs the export flow and serves export history.

    Without a client (local mode) exports are written locally only and there
    is no history.
    """

    def __init__(
        self,
        export_dir: Path,
        queries: QueryClient,
        client: supabase.SupabaseClient | None = None,
        user_id: str | None = None,
    ) -> None:
        self.export_dir = export_dir
        self.queries = queries
        self.client = client
        self.user_id = user_id

    async def logs(self) -> list[ExportLog]:
        client = self.client
        if client is None:
            return []
        logs = await self.queries.fetch_query(
            (EXPORTS, self.user_id),
            lambda: asyncio.to_thread(supabase.fetch_export_logs, client, self.user_id),
        )
        return list(logs)

    async def export(
        self, observations: list[Observation], *, save_to_storage: bool = True
    ) -> ExportResult:
        result = await asyncio.to_thread(
            export_observations,
            observations,
            export_dir=self.export_dir,
            client=self.client if save_to_storage else None,
            user_id=self.user_id,
        )
        self.queries.invalidate((EXPORTS,))
        self.queries.invalidate((OBSERVATIONS,))
        return result

    async def download(self, file_path: str, file_name: str) -> Path:
        """Fetch a previous export from storage into the export directory.

        Raises:
            RemoteStoreError: If no datastore is configured or the download fails.
        """
        if self.client is None:
            msg = "Export history requires a configured datastore"
            raise supabase.RemoteStoreError(msg)
        content = await asyncio.to_thread(supabase.download_export, self.client, file_path)
        self.export_dir.mkdir(parents=True, exist_ok=True)
        target = self.export_dir / file_name
        await asyncio.to_thread(target.write_bytes, content)
        return target


# =============================================================================
# Composition
# =============================================================================


@dataclass
class Stores:
    """Everything the UI or CLI needs, wired for one mode."""

    observations: ObservationStore
    locations: LocationStore
    exports: ExportService
    queries: QueryClient
    remote: bool


def build_stores(
    settings: Settings,
    user_id: str | None = None,
    *,
    client: supabase.SupabaseClient | None = None,
    queries: QueryClient | None = None,
) -> Stores:
    """
    Wire stores for the mode the settings select.

    The remote/local decision is made here, once. Changing configuration
    means building new stores.

    Args:
        settings: Startup configuration.
        user_id: Signed-in user, or None for anonymous/local data.
        client: Pre-built datastore client (defaults to one from settings).
        queries: Shared query cache (defaults to a new one).
    """
    queries = queries or QueryClient(stale_time=settings.query_stale_seconds)

    if settings.remote_configured:
        client = client or supabase.SupabaseClient.from_settings(settings)
        return Stores(
            observations=RemoteObservationStore(client, queries, user_id),
            locations=RemoteLocationStore(client, queries, user_id),
            exports=ExportService(settings.export_dir, queries, client, user_id),
            queries=queries,
            remote=True,
        )

    kv = KeyValueStore(settings.data_dir)
    return Stores(
        observations=LocalObservationStore(kv),
        locations=LocalLocationStore(kv),
        exports=ExportService(settings.export_dir, queries),
        queries=queries,
        remote=False,
    )
