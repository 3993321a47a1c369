"""Job postings: recruiter CRUD and candidate-side matching."""
from __future__ import annotations

from typing import Any

from jobcraft.log import get_logger
from jobcraft.matcher import match_jobs
from jobcraft.models import JOB_STATUSES, JobPosting, Profile, utc_now
from jobcraft.profiles import NOT_AUTHENTICATED
from jobcraft.stores import DataStore, StoreError

log = get_logger(__name__)

EDITABLE_FIELDS: tuple[str, ...] = (
    "title", "company", "description", "required_skills",
    "location", "salary_range", "status",
)


def _newest_first(rows: list[dict[str, Any]]) -> list[JobPosting]:
    jobs = [JobPosting.from_row(r) for r in rows]
    jobs.sort(key=lambda j: j.created_at, reverse=True)
    return jobs


def _clean_skills(skills: list[str]) -> list[str]:
    return [s.strip() for s in skills if isinstance(s, str) and s.strip()]


def create_job(
    store: DataStore,
    user_id: str,
    *,
    title: str,
    company: str,
    description: str,
    required_skills: list[str] | None = None,
    location: str | None = None,
    salary_range: str | None = None,
    status: str = "active",
) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    if status not in JOB_STATUSES:
        return {"error": f"Invalid job status: {status}"}
    if not (title.strip() and company.strip() and description.strip()):
        return {"error": "Title, company and description are required"}

    try:
        profile = store.select_one("profiles", id=user_id)
        if not profile or Profile.from_row(profile).role != "recruiter":
            return {"error": "Only recruiters can create job postings"}
        row = store.insert("jobs", {
            "recruiter_id": user_id,
            "title": title.strip(),
            "company": company.strip(),
            "description": description,
            "required_skills": _clean_skills(required_skills or []),
            "location": location or None,
            "salary_range": salary_range or None,
            "status": status,
        })
    except StoreError as exc:
        log.error("Creating job for %s failed: %s", user_id, exc)
        return {"error": str(exc)}
    log.info("Job created: %s @ %s [%s]", row["title"], row["company"], status)
    return {"data": JobPosting.from_row(row)}


def get_active_jobs(store: DataStore) -> dict[str, Any]:
    try:
        rows = store.select("jobs", status="active")
    except StoreError as exc:
        log.error("Loading active jobs failed: %s", exc)
        return {"error": str(exc)}
    return {"data": _newest_first(rows)}


def get_recruiter_jobs(store: DataStore, user_id: str) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        rows = store.select("jobs", recruiter_id=user_id)
    except StoreError as exc:
        log.error("Loading jobs for recruiter %s failed: %s", user_id, exc)
        return {"error": str(exc)}
    return {"data": _newest_first(rows)}


def update_job(store: DataStore, user_id: str, job_id: str, **updates: Any) -> dict[str, Any]:
    """Apply *updates* to a job owned by *user_id*."""
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    unknown = set(updates) - set(EDITABLE_FIELDS)
    if unknown:
        return {"error": f"Cannot update field(s): {', '.join(sorted(unknown))}"}
    if "status" in updates and updates["status"] not in JOB_STATUSES:
        return {"error": f"Invalid job status: {updates['status']}"}
    if "required_skills" in updates:
        updates["required_skills"] = _clean_skills(updates["required_skills"] or [])

    try:
        rows = store.update(
            "jobs", {**updates, "updated_at": utc_now()}, id=job_id, recruiter_id=user_id,
        )
    except StoreError as exc:
        log.error("Updating job %s failed: %s", job_id, exc)
        return {"error": str(exc)}
    if not rows:
        return {"error": "Job not found"}
    return {"data": JobPosting.from_row(rows[0])}


def delete_job(store: DataStore, user_id: str, job_id: str) -> dict[str, Any]:
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        removed = store.delete("jobs", id=job_id, recruiter_id=user_id)
    except StoreError as exc:
        log.error("Deleting job %s failed: %s", job_id, exc)
        return {"error": str(exc)}
    if not removed:
        return {"error": "Job not found"}
    log.info("Job %s deleted", job_id)
    return {"data": {"id": job_id}}


def toggle_job_status(store: DataStore, user_id: str, job_id: str, status: str) -> dict[str, Any]:
    """Close or reopen a posting."""
    if status not in ("active", "closed"):
        return {"error": f"Invalid job status: {status}"}
    return update_job(store, user_id, job_id, status=status)


def get_job_matches(
    store: DataStore,
    user_id: str,
    *,
    query: str = "",
    min_match: int = 0,
    sort_by: str = "match",
) -> dict[str, Any]:
    """Active jobs scored against the candidate's profile skills."""
    if not user_id:
        return dict(NOT_AUTHENTICATED)
    try:
        profile_row = store.select_one("profiles", id=user_id)
        rows = store.select("jobs", status="active")
    except StoreError as exc:
        log.error("Loading job matches for %s failed: %s", user_id, exc)
        return {"error": str(exc)}

    skills = Profile.from_row(profile_row).skills if profile_row else []
    try:
        matches = match_jobs(skills, _newest_first(rows), query=query, min_match=min_match, sort_by=sort_by)
    except ValueError as exc:
        return {"error": str(exc)}
    return {"data": matches}
