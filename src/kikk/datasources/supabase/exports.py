"""Export persistence: spreadsheet files in storage plus the ``export_logs`` table."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from kikk.datasources.supabase.client import (
    EXPORT_LOGS_TABLE,
    EXPORTS_BUCKET,
    OBSERVATIONS_TABLE,
    RemoteStoreError,
    in_,
    owner_filter,
)
from kikk.schemas import ExportLog

if TYPE_CHECKING:
    from kikk.datasources.supabase.client import SupabaseClient

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ANONYMOUS_FOLDER = "anonymous"


def export_path(file_name: str, user_id: str | None = None) -> str:
    """Storage path for an export: one folder per user, or ``anonymous``."""
    return f"{user_id or ANONYMOUS_FOLDER}/{file_name}"


def upload_export(
    client: SupabaseClient,
    content: bytes,
    file_name: str,
    user_id: str | None = None,
) -> str:
    """Upload a workbook to the ``exports`` bucket (never overwrites). Returns its path."""
    return client.upload(
        EXPORTS_BUCKET,
        export_path(file_name, user_id),
        content,
        content_type=XLSX_CONTENT_TYPE,
        upsert=False,
    )


def download_export(client: SupabaseClient, file_path: str) -> bytes:
    return client.download(EXPORTS_BUCKET, file_path)


def export_file_url(client: SupabaseClient, file_path: str) -> str:
    return client.public_url(EXPORTS_BUCKET, file_path)


def save_export_log(
    client: SupabaseClient,
    observation_ids: list[str],
    file_name: str,
    file_path: str | None,
    user_id: str | None = None,
) -> ExportLog:
    """Insert one ``export_logs`` row describing a finished export."""
    log = ExportLog(
        user_id=user_id,
        exported_at=datetime.now(UTC),
        observation_ids=observation_ids,
        file_name=file_name,
        file_path=file_path,
        observation_count=len(observation_ids),
    )
    row = log.model_dump(mode="json", by_alias=True, exclude={"id", "created_at"})
    inserted = client.insert(EXPORT_LOGS_TABLE, [row])
    if not inserted:
        msg = "Failed to insert export log"
        raise RemoteStoreError(msg)
    return ExportLog.model_validate(inserted[0])


def fetch_export_logs(client: SupabaseClient, user_id: str | None = None) -> list[ExportLog]:
    params = {
        "select": "*",
        "userId": owner_filter(user_id),
        "order": "exportedAt.desc",
    }
    return [ExportLog.model_validate(r) for r in client.select(EXPORT_LOGS_TABLE, params)]


def mark_observations_exported(client: SupabaseClient, observation_ids: list[str]) -> None:
    """
    Stamp ``lastExportedAt`` on the given observations.

    ``exportCount`` is incremented by a trigger in the database, not here.
    """
    if not observation_ids:
        return
    client.update(
        OBSERVATIONS_TABLE,
        {"lastExportedAt": datetime.now(UTC).isoformat()},
        {"id": in_(observation_ids)},
    )
