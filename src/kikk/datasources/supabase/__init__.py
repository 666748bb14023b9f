"""Hosted datastore (Supabase) data source.

Table CRUD for observations, species entries, saved locations and export
logs, plus the ``exports`` storage bucket.

Public API:
  - client: SupabaseClient, RemoteStoreError, table/bucket names
  - observations: fetch/create/update/delete_observation
  - locations: fetch/create/update/delete_user_location
  - exports: upload_export, download_export, save_export_log,
    fetch_export_logs, mark_observations_exported
"""

from kikk.datasources.supabase.client import RemoteStoreError, SupabaseClient
from kikk.datasources.supabase.exports import (
    download_export,
    export_file_url,
    fetch_export_logs,
    mark_observations_exported,
    save_export_log,
    upload_export,
)
from kikk.datasources.supabase.locations import (
    create_user_location,
    delete_user_location,
    fetch_user_locations,
    update_user_location,
)
from kikk.datasources.supabase.observations import (
    create_observation,
    delete_observation,
    fetch_observations,
    update_observation,
)

__all__ = [
    "RemoteStoreError",
    "SupabaseClient",
    "create_observation",
    "create_user_location",
    "delete_observation",
    "delete_user_location",
    "download_export",
    "export_file_url",
    "fetch_export_logs",
    "fetch_observations",
    "fetch_user_locations",
    "mark_observations_exported",
    "save_export_log",
    "update_observation",
    "update_user_location",
    "upload_export",
]
