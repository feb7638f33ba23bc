"""Minimal Supabase client: PostgREST tables, Storage buckets and Auth, over httpx."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional
from urllib.parse import quote

import httpx
from loguru import logger

from karaoke.backend import config

UPLOAD_CHUNK_SIZE = 256 * 1024

ProgressCallback = Callable[[int, int], None]


class SupabaseError(Exception):
    """A storage, database or auth call was rejected or never reached the backend."""

    def __init__(self, message: str, status_code: int = 0, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message, "status_code": self.status_code}
        if self.details:
            payload["details"] = self.details
        return payload


class SupabaseClient:
    """Talks to one Supabase project with a service or anon key."""

    def __init__(
        self,
        url: str,
        key: str,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        if not url or not key:
            raise SupabaseError("Supabase URL and key must be configured")
        self.url = url.rstrip("/")
        self._key = key
        self._http = httpx.Client(
            base_url=self.url,
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=timeout,
            transport=transport,
        )

    def close(self):
        self._http.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[supabase] {method} {path} failed: {e}")
            raise SupabaseError(f"Supabase unreachable: {e}") from e

        if response.is_error:
            details = _error_body(response)
            message = (
                details.get("message")
                or details.get("error_description")
                or details.get("error")
                or response.reason_phrase
            )
            logger.error(f"[supabase] {method} {path} -> {response.status_code}: {message}")
            raise SupabaseError(str(message), response.status_code, details)
        return response

    # -- Database -----------------------------------------------------------

    def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = f"{order}.{'desc' if desc else 'asc'}"
        if limit is not None:
            params["limit"] = limit
        return self._request("GET", f"/rest/v1/{table}", params=params).json()

    def insert(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        response = self._request(
            "POST",
            f"/rest/v1/{table}",
            json=rows,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    def insert_single(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        rows = self.insert(table, [row])
        if len(rows) != 1:
            raise SupabaseError(f"Expected one inserted row in '{table}', got {len(rows)}")
        return rows[0]

    # -- Storage ------------------------------------------------------------

    def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        cache_control: str = "3600",
        upsert: bool = False,
        progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        """Upload ``data`` to ``bucket/path``, reporting ``progress(loaded, total)`` per chunk."""
        total = len(data)

        def _chunks() -> Iterator[bytes]:
            loaded = 0
            for start in range(0, total, UPLOAD_CHUNK_SIZE):
                chunk = data[start:start + UPLOAD_CHUNK_SIZE]
                yield chunk
                loaded += len(chunk)
                if progress:
                    progress(loaded, total)

        response = self._request(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(path)}",
            content=_chunks(),
            headers={
                "Content-Type": content_type,
                "Content-Length": str(total),
                "cache-control": f"max-age={cache_control}",
                "x-upsert": "true" if upsert else "false",
            },
        )
        return response.json()

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{quote(path)}"

    # -- Auth ---------------------------------------------------------------

    def get_user(self, access_token: str) -> Dict[str, Any]:
        response = self._request(
            "GET",
            "/auth/v1/user",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        return response.json()


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text} if response.text else {}
    return body if isinstance(body, dict) else {"message": str(body)}


_client: Optional[SupabaseClient] = None


def get_supabase_client() -> SupabaseClient:
    global _client
    if _client is None:
        _client = SupabaseClient(config.SUPABASE_URL, config.SUPABASE_KEY)
    return _client
