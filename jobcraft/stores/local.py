"""JSON-file store: one file per table, with advisory file locking."""
from __future__ import annotations

import fcntl
import json
import uuid
from pathlib import Path
from typing import Any

from jobcraft.log import get_logger
from jobcraft.models import utc_now
from jobcraft.stores.base import DataStore, StoreError, check_table

log = get_logger(__name__)


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


def _matches(row: dict[str, Any], eq: dict[str, Any]) -> bool:
    return all(row.get(k) == v for k, v in eq.items())


class LocalStore(DataStore):
    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def _path(self, table: str) -> Path:
        check_table(table)
        return self.data_dir / f"{table}.json"

    def _read(self, f) -> list[dict[str, Any]]:
        f.seek(0)
        raw = f.read()
        if not raw.strip():
            return []
        try:
            rows = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Corrupt table file {Path(f.name).name}: {exc}") from exc
        if not isinstance(rows, list):
            raise StoreError(f"Table file {Path(f.name).name} must hold a JSON list")
        return rows

    def _write(self, f, rows: list[dict[str, Any]]) -> None:
        f.seek(0)
        f.truncate()
        json.dump(rows, f, indent=2, ensure_ascii=False)
        f.flush()

    def _open(self, table: str):
        path = self._path(table)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        return open(path, "r+", encoding="utf-8")

    def select(self, table: str, **eq: Any) -> list[dict[str, Any]]:
        path = self._path(table)
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            try:
                rows = self._read(f)
            finally:
                _unlock(f)
        return [r for r in rows if _matches(r, eq)]

    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        now = utc_now()
        new = {"id": uuid.uuid4().hex, "created_at": now, "updated_at": now, **row}
        with self._open(table) as f:
            _lock(f)
            try:
                rows = self._read(f)
                if any(r.get("id") == new["id"] for r in rows):
                    raise StoreError(f"Duplicate id in {table}: {new['id']}")
                rows.append(new)
                self._write(f, rows)
            finally:
                _unlock(f)
        log.debug("Inserted %s/%s", table, new["id"])
        return new

    def update(self, table: str, changes: dict[str, Any], **eq: Any) -> list[dict[str, Any]]:
        updated: list[dict[str, Any]] = []
        with self._open(table) as f:
            _lock(f)
            try:
                rows = self._read(f)
                for r in rows:
                    if _matches(r, eq):
                        r.update(changes)
                        if "updated_at" not in changes:
                            r["updated_at"] = utc_now()
                        updated.append(dict(r))
                if updated:
                    self._write(f, rows)
            finally:
                _unlock(f)
        log.debug("Updated %d row(s) in %s", len(updated), table)
        return updated

    def delete(self, table: str, **eq: Any) -> int:
        with self._open(table) as f:
            _lock(f)
            try:
                rows = self._read(f)
                kept = [r for r in rows if not _matches(r, eq)]
                removed = len(rows) - len(kept)
                if removed:
                    self._write(f, kept)
            finally:
                _unlock(f)
        log.debug("Deleted %d row(s) from %s", removed, table)
        return removed
