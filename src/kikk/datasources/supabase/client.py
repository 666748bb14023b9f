"""
Supabase REST client.

Thin wrapper over the PostgREST table API and the storage API of a hosted
Supabase project. Every non-2xx response becomes a ``RemoteStoreError``
carrying the backend's error payload. Nothing is retried here.

API docs:
  - Tables: https://postgrest.org/en/stable/references/api/tables_views.html
  - Storage: https://supabase.com/docs/reference/api/storage
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import requests

from kikk.services.http import DEFAULT_TIMEOUT, create_session

if TYPE_CHECKING:
    from kikk.config import Settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tables and buckets
# ---------------------------------------------------------------------------
OBSERVATIONS_TABLE = "observations"
SPECIES_TABLE = "species"
LOCATIONS_TABLE = "user_locations"
EXPORT_LOGS_TABLE = "export_logs"
EXPORTS_BUCKET = "exports"

REST_PATH = "rest/v1"
STORAGE_PATH = "storage/v1"


class RemoteStoreError(Exception):
    """A request to the hosted datastore failed.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        payload: Error body returned by the backend (PostgREST/storage JSON).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


# ---------------------------------------------------------------------------
# PostgREST filter helpers
# ---------------------------------------------------------------------------


def eq(value: str) -> str:
    return f"eq.{value}"


def is_null() -> str:
    return "is.null"


def in_(values: list[str]) -> str:
    quoted = ",".join(f'"{v}"' for v in values)
    return f"in.({quoted})"


def owner_filter(user_id: str | None) -> str:
    """Filter for one owner's rows, or for unowned rows when ``user_id`` is None."""
    return eq(user_id) if user_id else is_null()


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class SupabaseClient:
    """Table and storage access for one Supabase project."""

    def __init__(
        self,
        url: str,
        key: str,
        *,
        access_token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.url = url.rstrip("/")
        self.key = key
        self.access_token = access_token
        self.timeout = timeout
        self.session = session or create_session(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseClient:
        return cls(
            settings.supabase_url,
            settings.supabase_key,
            access_token=settings.supabase_access_token,
            timeout=settings.http_timeout,
        )

    # -- tables --------------------------------------------------------------

    def select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        """GET rows matching ``params`` (PostgREST query syntax)."""
        resp = self._request("GET", self._table_url(table), params=params)
        rows: list[dict[str, Any]] = resp.json()
        return rows

    def insert(
        self,
        table: str,
        rows: list[dict[str, Any]],
        *,
        select: str | None = None,
    ) -> list[dict[str, Any]]:
        """POST rows and return them as stored."""
        params = {"select": select} if select else None
        resp = self._request(
            "POST",
            self._table_url(table),
            params=params,
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        inserted: list[dict[str, Any]] = resp.json()
        return inserted

    def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: dict[str, str],
        *,
        select: str | None = None,
    ) -> list[dict[str, Any]]:
        """PATCH rows matching ``filters`` and return them as stored."""
        params = dict(filters)
        if select:
            params["select"] = select
        resp = self._request(
            "PATCH",
            self._table_url(table),
            params=params,
            json=values,
            headers={"Prefer": "return=representation"},
        )
        updated: list[dict[str, Any]] = resp.json()
        return updated

    def delete(self, table: str, filters: dict[str, str]) -> None:
        """DELETE rows matching ``filters``."""
        self._request("DELETE", self._table_url(table), params=filters)

    # -- storage -------------------------------------------------------------

    def upload(
        self,
        bucket: str,
        path: str,
        content: bytes,
        *,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        """Upload an object and return its path within the bucket."""
        self._request(
            "POST",
            f"{self.url}/{STORAGE_PATH}/object/{bucket}/{path}",
            data=content,
            headers={"Content-Type": content_type, "x-upsert": "true" if upsert else "false"},
        )
        return path

    def download(self, bucket: str, path: str) -> bytes:
        resp = self._request("GET", f"{self.url}/{STORAGE_PATH}/object/{bucket}/{path}")
        return resp.content

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/{STORAGE_PATH}/object/public/{bucket}/{path}"

    # -- internals -----------------------------------------------------------

    def _table_url(self, table: str) -> str:
        return f"{self.url}/{REST_PATH}/{table}"

    def _auth_headers(self) -> dict[str, str]:
        return {
            "apikey": self.key,
            "Authorization": f"Bearer {self.access_token or self.key}",
        }

    def _request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> requests.Response:
        all_headers = {**self._auth_headers(), **(headers or {})}
        logger.debug("%s %s %s", method, url, kwargs.get("params") or "")
        try:
            resp = self.session.request(
                method, url, headers=all_headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            raise RemoteStoreError(f"{method} {url} failed: {exc}") from exc
        if not resp.ok:
            raise _error_from_response(resp)
        return resp


def _error_from_response(resp: requests.Response) -> RemoteStoreError:
    """Build a RemoteStoreError from a failed response, keeping its JSON body."""
    try:
        payload = resp.json()
    except ValueError:
        payload = {"message": resp.text}
    if not isinstance(payload, dict):
        payload = {"message": str(payload)}
    message = payload.get("message") or payload.get("error") or resp.reason or "request failed"
    return RemoteStoreError(str(message), status_code=resp.status_code, payload=payload)
