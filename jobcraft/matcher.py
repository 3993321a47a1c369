"""Skill overlap between a candidate and job postings."""
from __future__ import annotations

import math

from jobcraft.log import get_logger
from jobcraft.models import JobMatch, JobPosting, MatchResult, normalize_skill

log = get_logger(__name__)

STRONG_MATCH = 70
MODERATE_MATCH = 50


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_match_percentage(user_skills: list[str], job_skills: list[str]) -> MatchResult:
    """Share of *job_skills* the candidate has, compared case-insensitively.

    Matched labels keep the job's casing and order. Duplicates in
    *job_skills* count once per occurrence.
    """
    if not job_skills:
        return MatchResult(percentage=0, matched_skills=[])

    have = {normalize_skill(s) for s in user_skills}
    matched = [s for s in job_skills if normalize_skill(s) in have]
    percentage = round_half_up(len(matched) / len(job_skills) * 100)
    return MatchResult(percentage=percentage, matched_skills=matched)


def match_tier(percentage: int) -> str:
    if percentage >= STRONG_MATCH:
        return "strong"
    if percentage >= MODERATE_MATCH:
        return "moderate"
    return "low"


def _matches_query(job: JobPosting, query: str) -> bool:
    q = query.lower()
    return (
        q in job.title.lower()
        or q in job.company.lower()
        or q in job.description.lower()
        or any(q in s.lower() for s in job.required_skills)
    )


def match_jobs(
    user_skills: list[str],
    jobs: list[JobPosting],
    *,
    query: str = "",
    min_match: int = 0,
    sort_by: str = "match",
) -> list[JobMatch]:
    """Attach a MatchResult to every job, then filter and sort.

    *sort_by* is ``"match"`` (best first, ties keep input order) or
    ``"date"`` (newest ``created_at`` first).
    """
    if sort_by not in ("match", "date"):
        raise ValueError(f"Unknown sort order: {sort_by!r}")

    result = [JobMatch(job=j, match=calculate_match_percentage(user_skills, j.required_skills)) for j in jobs]
    if query.strip():
        result = [m for m in result if _matches_query(m.job, query.strip())]
    if min_match > 0:
        result = [m for m in result if m.percentage >= min_match]

    if sort_by == "match":
        result.sort(key=lambda m: -m.percentage)
    else:
        result.sort(key=lambda m: m.job.created_at, reverse=True)

    log.debug("Matched %d job(s) → %d after filters", len(jobs), len(result))
    return result
