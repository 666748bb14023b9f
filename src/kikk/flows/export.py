"""
Prefect flow for exporting observations to a spreadsheet.

Steps, in order:
    1. render the workbook (one row per species entry)
    2. write it to the local export directory
    3. when a datastore client is given: upload the file, save an
       ``export_logs`` row, stamp ``lastExportedAt`` on the observations

The local file is the primary artifact. A failure in step 3 is reported in
``ExportResult.remote_error`` and never removes or alters the local file.
No task retries.

Run locally (exports every stored observation):
    python -m kikk.flows.export
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import requests
from prefect import flow, get_run_logger, task
from prefect.cache_policies import NO_CACHE

from kikk.datasources import supabase
from kikk.renderers.spreadsheet import build_export_rows, build_workbook

if TYPE_CHECKING:
    from kikk.schemas import Observation


@dataclass
class ExportResult:
    """Outcome of one export run."""

    file_name: str
    local_path: Path
    row_count: int
    remote_path: str | None = None
    remote_saved: bool = False
    remote_error: str | None = None


def export_file_name(now: datetime | None = None) -> str:
    """Timestamped, filesystem-safe workbook name, to the millisecond."""
    now = now or datetime.now()
    return f"observations-export-{now:%Y-%m-%d_%H-%M-%S}-{now.microsecond // 1000:03d}.xlsx"


@task(name="render-workbook", retries=0, cache_policy=NO_CACHE)
def render_workbook(observations: list[Observation]) -> bytes:
    """Render observations to xlsx bytes."""
    return build_workbook(observations)


@task(name="save-local-export", retries=0, cache_policy=NO_CACHE)
def save_local(content: bytes, export_dir: Path, file_name: str) -> Path:
    """Write the workbook to the export directory."""
    export_dir.mkdir(parents=True, exist_ok=True)
    target = export_dir / file_name
    target.write_bytes(content)
    return target


@task(name="upload-export", retries=0, cache_policy=NO_CACHE)
def upload(
    client: supabase.SupabaseClient, content: bytes, file_name: str, user_id: str | None
) -> str:
    """Upload the workbook to storage."""
    return supabase.upload_export(client, content, file_name, user_id)


@task(name="save-export-log", retries=0, cache_policy=NO_CACHE)
def record_log(
    client: supabase.SupabaseClient,
    observation_ids: list[str],
    file_name: str,
    file_path: str,
    user_id: str | None,
) -> None:
    """Insert the ``export_logs`` row."""
    supabase.save_export_log(client, observation_ids, file_name, file_path, user_id)


@task(name="mark-exported", retries=0, cache_policy=NO_CACHE)
def mark_exported(client: supabase.SupabaseClient, observation_ids: list[str]) -> None:
    """Stamp ``lastExportedAt`` on the exported observations."""
    supabase.mark_observations_exported(client, observation_ids)


@flow(name="export-observations", log_prints=True, validate_parameters=False)
def export_observations(
    observations: list[Observation],
    export_dir: Path = Path("exports"),
    client: supabase.SupabaseClient | None = None,
    user_id: str | None = None,
) -> ExportResult:
    """
    Export observations to xlsx.

    Args:
        observations: Observations to include; each contributes one row per
            species entry.
        export_dir: Where the local copy is written.
        client: Datastore client. None skips the remote steps.
        user_id: Owner folder and log owner; None means anonymous.
    """
    file_name = export_file_name()
    content = render_workbook(observations)
    local_path = save_local(content, export_dir, file_name)
    row_count = len(build_export_rows(observations))
    print(f"Saved {row_count} rows to {local_path}")

    result = ExportResult(file_name=file_name, local_path=local_path, row_count=row_count)
    if client is None:
        return result

    observation_ids = [obs.id for obs in observations]
    try:
        result.remote_path = upload(client, content, file_name, user_id)
        record_log(client, observation_ids, file_name, result.remote_path, user_id)
        mark_exported(client, observation_ids)
    except (supabase.RemoteStoreError, requests.RequestException) as e:
        result.remote_error = str(e)
        get_run_logger().warning("Export saved locally but not in the datastore: %s", e)
        return result

    result.remote_saved = True
    print(f"Uploaded export to {result.remote_path}")
    return result


if __name__ == "__main__":
    import asyncio

    from kikk.config import get_settings
    from kikk.stores import build_stores

    settings = get_settings()
    stores = build_stores(settings)
    observations = asyncio.run(stores.observations.fetch())
    export_observations(observations, export_dir=settings.export_dir, client=stores.exports.client)
