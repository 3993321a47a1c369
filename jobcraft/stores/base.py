from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

TABLES: tuple[str, ...] = ("profiles", "resumes", "jobs", "applications")


class StoreError(Exception):
    """A data-store read or write failed."""


class DataStore(ABC):
    """Row store keyed by table name; filters are column equality."""

    @abstractmethod
    def select(self, table: str, **eq: Any) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        pass

    @abstractmethod
    def update(self, table: str, changes: dict[str, Any], **eq: Any) -> list[dict[str, Any]]:
        pass

    @abstractmethod
    def delete(self, table: str, **eq: Any) -> int:
        pass

    def select_one(self, table: str, **eq: Any) -> dict[str, Any] | None:
        rows = self.select(table, **eq)
        return rows[0] if rows else None


def check_table(table: str) -> None:
    if table not in TABLES:
        raise StoreError(f"Unknown table: {table!r}")
