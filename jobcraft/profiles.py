"""Read and write user profiles (role, display name, skills)."""
from __future__ import annotations

from typing import Any

from jobcraft.log import get_logger
from jobcraft.models import PROFILE_ROLES, Profile, utc_now
from jobcraft.stores import DataStore, StoreError

log = get_logger(__name__)

NOT_AUTHENTICATED: dict[str, str] = {"error": "Not authenticated"}


def get_profile(store: DataStore, user_id: str) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        row = store.select_one("profiles", id=user_id)
    except StoreError as exc:
        log.error("Loading profile %s failed: %s", user_id, exc)
        return {"error": str(exc)}
    return {"data": Profile.from_row(row) if row else None}


def save_profile(
    store: DataStore,
    user_id: str,
    *,
    email: str,
    role: str = "candidate",
    full_name: str | None = None,
    skills: list[str] | None = None,
) -> dict[str, Any]:
    """Create the profile for *user_id* or overwrite its fields."""
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    if role not in PROFILE_ROLES:
        return {"error": f"Invalid role: {role}"}

    fields: dict[str, Any] = {"email": email, "role": role, "full_name": full_name}
    if skills is not None:
        fields["skills"] = [s.strip() for s in skills if s.strip()]
    try:
        if store.select_one("profiles", id=user_id):
            rows = store.update("profiles", {**fields, "updated_at": utc_now()}, id=user_id)
            if not rows:
                return {"error": "Profile not found"}
            row = rows[0]
        else:
            row = store.insert("profiles", {"id": user_id, "skills": [], **fields})
    except StoreError as exc:
        log.error("Saving profile %s failed: %s", user_id, exc)
        return {"error": str(exc)}
    log.info("Profile saved for %s (%s)", user_id, role)
    return {"data": Profile.from_row(row)}


def update_skills(store: DataStore, user_id: str, skills: list[str]) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        rows = store.update("profiles", {"skills": list(skills), "updated_at": utc_now()}, id=user_id)
    except StoreError as exc:
        log.error("Updating skills for %s failed: %s", user_id, exc)
        return {"error": str(exc)}
    if not rows:
        return {"error": "Profile not found"}
    return {"data": Profile.from_row(rows[0])}
