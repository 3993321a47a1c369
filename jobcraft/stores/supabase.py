"""Hosted Postgres through Supabase's PostgREST API.

Row-level security on the backend scopes what the key can see; this
client only adds the column filters the services ask for.
"""
from __future__ import annotations

from typing import Any

import requests

from jobcraft.log import get_logger
from jobcraft.retry import retry
from jobcraft.stores.base import DataStore, StoreError, check_table

log = get_logger(__name__)

_TRANSPORT_ERRORS = (requests.ConnectionError, requests.Timeout)


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class SupabaseStore(DataStore):
    def __init__(
        self,
        url: str,
        key: str,
        *,
        access_token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 15.0,
    ) -> None:
        if not url or not key:
            raise StoreError("SUPABASE_URL and SUPABASE_KEY are required for the supabase store")
        self.base = url.rstrip("/") + "/rest/v1"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {access_token or key}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }

    @staticmethod
    def _params(eq: dict[str, Any]) -> dict[str, str]:
        return {col: f"{'is' if v is None else 'eq'}.{_filter_value(v)}" for col, v in eq.items()}

    @retry(max_attempts=3, base_delay=1.0, max_delay=10.0, retryable=_TRANSPORT_ERRORS)
    def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        body: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        check_table(table)
        r = self.session.request(
            method,
            f"{self.base}/{table}",
            params=params,
            json=body,
            headers=self.headers,
            timeout=self.timeout,
        )
        if r.status_code >= 400:
            try:
                detail = r.json().get("message") or r.text
            except ValueError:
                detail = r.text
            raise StoreError(f"{method} {table} failed ({r.status_code}): {detail}")
        if not r.content:
            return []
        try:
            data = r.json()
        except ValueError as exc:
            raise StoreError(f"{method} {table}: invalid JSON response") from exc
        return data if isinstance(data, list) else [data]

    def _call(self, method: str, table: str, **kwargs: Any) -> list[dict[str, Any]]:
        try:
            return self._request(method, table, **kwargs)
        except _TRANSPORT_ERRORS as exc:
            raise StoreError(f"{method} {table} failed: {exc}") from exc

    def select(self, table: str, **eq: Any) -> list[dict[str, Any]]:
        params = {"select": "*", **self._params(eq)}
        return self._call("GET", table, params=params)

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        rows = self._call("POST", table, body=row)
        if not rows:
            raise StoreError(f"Insert into {table} returned no row")
        log.debug("Inserted %s/%s", table, rows[0].get("id"))
        return rows[0]

    def update(self, table: str, changes: dict[str, Any], **eq: Any) -> list[dict[str, Any]]:
        return self._call("PATCH", table, params=self._params(eq), body=changes)

    def delete(self, table: str, **eq: Any) -> int:
        if not eq:
            raise StoreError("Refusing to delete without a filter")
        return len(self._call("DELETE", table, params=self._params(eq)))
