from __future__ import annotations

import pytest

from jobcraft.models import (
    Certification,
    Education,
    Experience,
    PersonalInfo,
    Project,
    ResumeDocument,
)
from jobcraft.scorer import calculate_ats_score, score_breakdown


def words(n: int) -> str:
    return " ".join(f"w{i}" for i in range(n))


def test_empty_resume_scores_zero():
    assert calculate_ats_score(ResumeDocument()) == 0


def test_full_personal_info_only_scores_twenty():
    info = PersonalInfo("Ada", "a@x.io", "555", "London", "in/ada", "ada.dev")
    assert calculate_ats_score(ResumeDocument(personal_info=info)) == 20


@pytest.mark.parametrize("filled, expected", [(1, 3), (2, 7), (3, 10), (5, 17)])
def test_partial_personal_info_is_pro_rata(filled, expected):
    values = ["v"] * filled + [""] * (6 - filled)
    doc = ResumeDocument(personal_info=PersonalInfo(*values))
    assert calculate_ats_score(doc) == expected


@pytest.mark.parametrize(
    "count, points",
    [(0, 0), (14, 0), (15, 5), (29, 5), (30, 10), (49, 10), (50, 15), (200, 15)],
)
def test_summary_tiers(count, points):
    doc = ResumeDocument(summary=words(count))
    assert score_breakdown(doc).summary == points
    assert calculate_ats_score(doc) == points


def test_summary_word_count_ignores_extra_whitespace():
    doc = ResumeDocument(summary="  " + "  \n ".join(f"w{i}" for i in range(30)) + "  ")
    assert score_breakdown(doc).summary == 10


def test_experience_entries_and_detail_bonus():
    short = Experience(description="x" * 50)
    detailed = Experience(description="x" * 51)
    assert score_breakdown(ResumeDocument(experience=[short])).experience == 5
    assert score_breakdown(ResumeDocument(experience=[detailed])).experience == 7
    many = ResumeDocument(experience=[Experience(description="y" * 80) for _ in range(6)])
    assert score_breakdown(many).experience == 25


def test_education_caps_at_fifteen():
    assert calculate_ats_score(ResumeDocument(education=[Education()])) == 8  # 7.5 rounds up
    assert calculate_ats_score(ResumeDocument(education=[Education()] * 2)) == 15
    assert calculate_ats_score(ResumeDocument(education=[Education()] * 5)) == 15


def test_skills_cap():
    assert calculate_ats_score(ResumeDocument(skills=[f"s{i}" for i in range(20)])) == 15
    assert calculate_ats_score(ResumeDocument(skills=["a", "b", "c"])) == 5  # 4.5 rounds up


def test_projects_and_certifications_share_a_cap():
    one = ResumeDocument(projects=[Project()])
    assert calculate_ats_score(one) == 3  # 2.5 rounds up
    mixed = ResumeDocument(projects=[Project()] * 2, certifications=[Certification()] * 3)
    assert score_breakdown(mixed).extras == 10


def test_end_to_end_scenario(full_resume):
    b = score_breakdown(full_resume)
    assert (b.personal_info, b.summary, b.experience, b.education, b.skills, b.extras) == (
        20, 15, 21, 15, 15, 5,
    )
    assert calculate_ats_score(full_resume) == 91


def test_maximum_is_one_hundred():
    doc = ResumeDocument(
        personal_info=PersonalInfo("a", "b", "c", "d", "e", "f"),
        summary=words(80),
        experience=[Experience(description="z" * 100) for _ in range(10)],
        education=[Education()] * 4,
        skills=[f"s{i}" for i in range(40)],
        projects=[Project()] * 4,
        certifications=[Certification()] * 4,
    )
    assert calculate_ats_score(doc) == 100


def test_score_is_recomputed_from_scratch(full_resume):
    first = calculate_ats_score(full_resume)
    full_resume.skills.clear()
    assert calculate_ats_score(full_resume) == first - 15
