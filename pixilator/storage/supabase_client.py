"""Supabase REST adapters for object storage and the generations table.

Processing flow:
    - Storage: `POST /storage/v1/object/<bucket>/<key>` with raw bytes; public
      objects are served from `/storage/v1/object/public/<bucket>/<key>`.
    - Table: PostgREST `POST /rest/v1/<table>` with `Prefer: return=representation`
      for inserts, `GET /rest/v1/<table>` with `eq.` filters, `order`, `offset`
      and `limit` for reads.

Error handling strategy:
    Every non-2xx status raises `requests.exceptions.HTTPError`; transport errors
    propagate. Degradation is decided by `gateway` and `library`.

Configuration:
    `SUPABASE_URL` and `SUPABASE_ANON_KEY` are read from the environment at import;
    when either is missing `create_supabase_stores` returns `(None, None)`.
"""

import os
from typing import Protocol
from urllib.parse import quote

import requests
from dotenv import load_dotenv

load_dotenv()


SUPABASE_URL = os.getenv("SUPABASE_URL", "").rstrip("/")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
SUPABASE_BUCKET = os.getenv("SUPABASE_BUCKET", "generated-images")
SUPABASE_TABLE = os.getenv("SUPABASE_TABLE", "generations")
SUPABASE_TIMEOUT_SECONDS = float(os.getenv("SUPABASE_TIMEOUT_SECONDS", "30"))


class ObjectStore(Protocol):
    """Minimal object-storage interface used by the persistence gateway."""

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def public_url(self, key: str) -> str:
        ...


class RecordTable(Protocol):
    """Minimal relational-table interface used by gateway and library."""

    def insert(self, record: dict) -> dict:
        ...

    def query(self, filters: dict, order: str, offset: int, limit: int) -> list[dict]:
        ...


def _auth_headers(api_key: str) -> dict:
    return {
        "apikey": api_key,
        "Authorization": f"Bearer {api_key}",
    }


class SupabaseStorage:
    """Object storage bucket accessed through the Supabase Storage REST API."""

    def __init__(self, base_url: str, api_key: str, bucket: str = SUPABASE_BUCKET,
                 timeout: float = SUPABASE_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.timeout = timeout

    def upload(self, key: str, data: bytes, content_type: str) -> None:
        headers = _auth_headers(self.api_key)
        headers["Content-Type"] = content_type
        headers["x-upsert"] = "false"

        response = requests.post(
            f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(key)}",
            headers=headers,
            data=data,
            timeout=self.timeout,
        )
        response.raise_for_status()

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"


class SupabaseTable:
    """One PostgREST table."""

    def __init__(self, base_url: str, api_key: str, table: str = SUPABASE_TABLE,
                 timeout: float = SUPABASE_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def insert(self, record: dict) -> dict:
        """Insert one row and return the stored representation.

        Raises:
            RuntimeError: the store acknowledged the insert without returning a row.
        """
        headers = _auth_headers(self.api_key)
        headers["Content-Type"] = "application/json"
        headers["Prefer"] = "return=representation"

        response = requests.post(self.url, headers=headers, json=record, timeout=self.timeout)
        response.raise_for_status()

        rows = response.json()
        if isinstance(rows, list):
            rows = rows[0] if rows else None
        if not isinstance(rows, dict):
            raise RuntimeError(f"Insert into {self.table} returned no row")
        return rows

    def query(self, filters: dict, order: str, offset: int, limit: int) -> list[dict]:
        """Return rows matching all equality `filters`, ordered and paginated."""
        params = {"select": "*", "order": order, "offset": offset, "limit": limit}
        for column, value in filters.items():
            if value is not None:
                params[column] = f"eq.{value}"

        response = requests.get(
            self.url,
            headers=_auth_headers(self.api_key),
            params=params,
            timeout=self.timeout,
        )
        response.raise_for_status()

        rows = response.json()
        return rows if isinstance(rows, list) else []


def is_configured() -> bool:
    return bool(SUPABASE_URL and SUPABASE_ANON_KEY)


def create_supabase_stores():
    """Return `(SupabaseStorage, SupabaseTable)` from the environment, or `(None, None)`."""
    if not is_configured():
        return None, None
    return (
        SupabaseStorage(SUPABASE_URL, SUPABASE_ANON_KEY),
        SupabaseTable(SUPABASE_URL, SUPABASE_ANON_KEY),
    )
