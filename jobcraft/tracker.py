"""Track job applications on a Kanban-style board.

Statuses are ordered for display (wishlist → applied → interview → offer
→ rejected) but any status may move to any other, including back out of
"rejected".
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from jobcraft.log import get_logger
from jobcraft.models import APPLICATION_STATUSES, Application, utc_now
from jobcraft.profiles import NOT_AUTHENTICATED
from jobcraft.stores import DataStore, StoreError

log = get_logger(__name__)

DEFAULT_STATUS = "wishlist"

STATUS_LABELS: dict[str, str] = {
    "wishlist": "Wishlist",
    "applied": "Applied",
    "interview": "Interview",
    "offer": "Offer",
    "rejected": "Rejected",
}


def validate_status(status: str) -> str:
    if status not in APPLICATION_STATUSES:
        raise ValueError(
            f"Invalid application status {status!r} "
            f"(expected one of: {', '.join(APPLICATION_STATUSES)})"
        )
    return status


def transition(app: Application, status: str) -> Application:
    """Return *app* moved to *status*; every move is allowed."""
    validate_status(status)
    return replace(app, status=status, updated_at=utc_now())


def group_by_status(apps: list[Application]) -> dict[str, list[Application]]:
    """Board columns in display order; every status present, possibly empty."""
    board: dict[str, list[Application]] = {s: [] for s in APPLICATION_STATUSES}
    for a in apps:
        board.setdefault(a.status, []).append(a)
    return board


# ── Persistence ──────────────────────────────────────────────────────────


def get_applications(store: DataStore, user_id: str) -> dict[str, Any]:
    if not user_id:
        return {**NOT_AUTHENTICATED, "data": []}
    try:
        rows = store.select("applications", user_id=user_id)
    except StoreError as exc:
        log.error("Loading applications for %s failed: %s", user_id, exc)
        return {"error": str(exc), "data": []}
    apps = [Application.from_row(r) for r in rows]
    apps.sort(key=lambda a: a.date_applied, reverse=True)
    return {"data": apps}


def add_application(
    store: DataStore,
    user_id: str,
    *,
    company: str,
    role: str,
    status: str | None = None,
    salary: str | None = None,
) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    if not company.strip() or not role.strip():
        return {"error": "Company and role are required"}
    status = status or DEFAULT_STATUS
    try:
        validate_status(status)
    except ValueError as exc:
        return {"error": str(exc)}

    try:
        row = store.insert("applications", {
            "user_id": user_id,
            "company": company.strip(),
            "role": role.strip(),
            "status": status,
            "salary": salary or None,
            "date_applied": datetime.now(timezone.utc).isoformat(),
        })
    except StoreError as exc:
        log.error("Adding application for %s failed: %s", user_id, exc)
        return {"error": str(exc)}
    log.debug("Tracked: %s @ %s [%s]", role, company, status)
    return {"data": Application.from_row(row)}


def update_status(store: DataStore, user_id: str, application_id: str, status: str) -> dict[str, Any]:
    """Move an application to *status* (e.g. applied -> interview)."""
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        validate_status(status)
    except ValueError as exc:
        return {"error": str(exc)}
    try:
        rows = store.update(
            "applications",
            {"status": status, "updated_at": utc_now()},
            id=application_id,
            user_id=user_id,
        )
    except StoreError as exc:
        log.error("Updating application %s failed: %s", application_id, exc)
        return {"error": str(exc)}
    if not rows:
        return {"error": "Application not found"}
    log.debug("Updated %s → %s", application_id, status)
    return {"data": Application.from_row(rows[0])}


def delete_application(store: DataStore, user_id: str, application_id: str) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        removed = store.delete("applications", id=application_id, user_id=user_id)
    except StoreError as exc:
        log.error("Deleting application %s failed: %s", application_id, exc)
        return {"error": str(exc)}
    if not removed:
        return {"error": "Application not found"}
    return {"data": {"id": application_id}}
