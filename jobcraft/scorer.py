"""ATS (Applicant Tracking System) score for a resume document.

The score is rebuilt from scratch on every call:

    personal info   6 fields, 20 pts pro rata
    summary         >=50 words 15, >=30 words 10, >=15 words 5
    experience      5 per entry (max 15) + 2 per description over 50 chars (max 10)
    education       7.5 per entry (max 15)
    skills          1.5 per skill (max 15)
    extras          2.5 per project or certification (max 10)
"""
from __future__ import annotations

from dataclasses import dataclass

from jobcraft.log import get_logger
from jobcraft.matcher import round_half_up
from jobcraft.models import ResumeDocument

log = get_logger(__name__)

MAX_SCORE = 100
PERSONAL_INFO_POINTS = 20
PERSONAL_INFO_FIELDS = 6
SUMMARY_TIERS: tuple[tuple[int, int], ...] = ((50, 15), (30, 10), (15, 5))
DETAILED_DESCRIPTION_CHARS = 50


@dataclass(frozen=True)
class AtsBreakdown:
    personal_info: float
    summary: float
    experience: float
    education: float
    skills: float
    extras: float

    @property
    def raw_total(self) -> float:
        return (
            self.personal_info + self.summary + self.experience
            + self.education + self.skills + self.extras
        )

    @property
    def total(self) -> int:
        return round_half_up(min(self.raw_total, MAX_SCORE))

    def as_rows(self) -> list[tuple[str, float, int]]:
        """(label, points, category max) for display."""
        return [
            ("Personal info", self.personal_info, 20),
            ("Summary", self.summary, 15),
            ("Experience", self.experience, 25),
            ("Education", self.education, 15),
            ("Skills", self.skills, 15),
            ("Projects & certifications", self.extras, 10),
        ]


def _summary_points(summary: str) -> int:
    if not summary:
        return 0
    words = len(summary.split())
    for min_words, points in SUMMARY_TIERS:
        if words >= min_words:
            return points
    return 0


def score_breakdown(resume: ResumeDocument) -> AtsBreakdown:
    filled = sum(1 for v in resume.personal_info.values() if v)
    personal = filled / PERSONAL_INFO_FIELDS * PERSONAL_INFO_POINTS

    detailed = [e for e in resume.experience if len(e.description or "") > DETAILED_DESCRIPTION_CHARS]
    experience = min(len(resume.experience) * 5, 15) + min(len(detailed) * 2, 10)

    return AtsBreakdown(
        personal_info=personal,
        summary=_summary_points(resume.summary),
        experience=experience,
        education=min(len(resume.education) * 7.5, 15),
        skills=min(len(resume.skills) * 1.5, 15),
        extras=min((len(resume.projects) + len(resume.certifications)) * 2.5, 10),
    )


def calculate_ats_score(resume: ResumeDocument) -> int:
    breakdown = score_breakdown(resume)
    log.debug("ATS breakdown %s → %d", breakdown, breakdown.total)
    return breakdown.total
