"""Kikk - field observation log for bird sightings.

Architecture::

    datasources/   External services (Supabase tables/storage, Artsdatabanken, Nominatim)
    store.py       On-disk key-value blobs (local fallback + preferences)
    local.py       Local-only entity collections built on the key-value store
    query.py       Query cache: freshness window, in-flight dedup, invalidation
    stores.py      ObservationStore / LocationStore, remote or local, picked once
    search.py      Debounced species lookup
    analysis/      Pure helpers over observations (recent species, proximity)
    renderers/     Pure data -> spreadsheet bytes
    flows/         Prefect orchestration (export pipeline)
    services/      Shared utilities (HTTP client)

Data flow: datasources / local -> query cache -> stores -> UI or CLI;
stores -> renderers -> flows/export -> local file (+ remote storage).
"""

__version__ = "0.1.0"

from kikk.config import Settings
from kikk.schemas import Observation, SpeciesObservation, TaxonRecord, UserLocation

__all__ = [
    "Observation",
    "Settings",
    "SpeciesObservation",
    "TaxonRecord",
    "UserLocation",
    "__version__",
]
