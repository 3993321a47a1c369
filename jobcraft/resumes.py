"""Persist resumes together with a freshly computed ATS score."""
from __future__ import annotations

from typing import Any

from jobcraft.log import get_logger
from jobcraft.models import Resume, ResumeDocument, utc_now
from jobcraft.profiles import NOT_AUTHENTICATED, update_skills
from jobcraft.scorer import calculate_ats_score
from jobcraft.stores import DataStore, StoreError

log = get_logger(__name__)


def save_resume(store: DataStore, user_id: str, content: ResumeDocument) -> dict[str, Any]:
    """Score *content*, then update the user's resume or create it.

    The user's profile skills are overwritten with the resume's skills so
    job matching sees the same list.
    """
    if not user_id:
        return dict(NOT_AUTHENTICATED)

    ats_score = calculate_ats_score(content)
    payload = {"content": content.to_dict(), "ats_score": ats_score}
    try:
        existing = store.select_one("resumes", user_id=user_id)
        if existing:
            rows = store.update("resumes", {**payload, "updated_at": utc_now()}, id=existing["id"])
            if not rows:
                return {"error": "Resume not found"}
            row = rows[0]
        else:
            row = store.insert("resumes", {"user_id": user_id, **payload})
    except StoreError as exc:
        log.error("Saving resume for %s failed: %s", user_id, exc)
        return {"error": str(exc)}

    synced = update_skills(store, user_id, content.skills)
    if "error" in synced:
        log.warning("Resume saved but profile skills not synced: %s", synced["error"])

    log.info("Resume saved for %s — ATS score %d", user_id, ats_score)
    return {"data": Resume.from_row(row)}


def load_resume(store: DataStore, user_id: str) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        row = store.select_one("resumes", user_id=user_id)
    except StoreError as exc:
        log.error("Loading resume for %s failed: %s", user_id, exc)
        return {"error": str(exc)}
    return {"data": Resume.from_row(row) if row else None}
