from __future__ import annotations

import pytest

from jobcraft import jobs, profiles, resumes, tracker
from jobcraft.models import Application, ResumeDocument
from jobcraft.stores import LocalStore, SupabaseStore

from conftest import FakeResponse, FakeSession


@pytest.fixture
def recruiter(store) -> str:
    profiles.save_profile(store, "rec-1", email="hr@acme.io", role="recruiter", full_name="Rita Recruiter")
    return "rec-1"


@pytest.fixture
def candidate(store) -> str:
    profiles.save_profile(store, "cand-1", email="c@example.com", full_name="Cai Candidate")
    return "cand-1"


# ── profiles ────────────────────────────────────────────────────────────


def test_profile_round_trip(store):
    assert profiles.get_profile(store, "u1") == {"data": None}
    saved = profiles.save_profile(store, "u1", email="u1@x.io", skills=[" Go ", ""])["data"]
    assert saved.role == "candidate"
    assert saved.skills == ["Go"]
    again = profiles.save_profile(store, "u1", email="u1@x.io", full_name="U One")["data"]
    assert again.full_name == "U One"
    assert again.skills == ["Go"]
    assert len(store.select("profiles")) == 1


def test_profile_rejects_bad_role_and_anonymous(store):
    assert profiles.save_profile(store, "u1", email="x", role="admin") == {"error": "Invalid role: admin"}
    assert profiles.get_profile(store, "") == {"error": "Not authenticated"}


# ── resumes ─────────────────────────────────────────────────────────────


def test_save_resume_scores_and_syncs_profile_skills(store, candidate, full_resume):
    saved = resumes.save_resume(store, candidate, full_resume)["data"]
    assert saved.ats_score == 91
    assert saved.content.skills == full_resume.skills
    assert profiles.get_profile(store, candidate)["data"].skills == full_resume.skills


def test_save_resume_updates_in_place_and_rescores(store, candidate, full_resume):
    first = resumes.save_resume(store, candidate, full_resume)["data"]
    full_resume.summary = ""
    second = resumes.save_resume(store, candidate, full_resume)["data"]
    assert second.id == first.id
    assert second.ats_score == 76
    assert len(store.select("resumes")) == 1
    loaded = resumes.load_resume(store, candidate)["data"]
    assert loaded.ats_score == 76
    assert loaded.content.experience[0].id == full_resume.experience[0].id


class ReadOnlyUpdates(LocalStore):
    """Rows stay readable but updates match nothing, as under row-level security."""

    def update(self, table, changes, **eq):
        return []


def test_save_returns_error_when_update_matches_no_row(tmp_path, full_resume):
    db = ReadOnlyUpdates(tmp_path / "data")
    db.insert("profiles", {"id": "u1", "email": "e", "role": "candidate", "skills": []})
    db.insert("resumes", {"user_id": "u1", "content": {}, "ats_score": 0})

    assert resumes.save_resume(db, "u1", full_resume) == {"error": "Resume not found"}
    assert profiles.save_profile(db, "u1", email="e") == {"error": "Profile not found"}
    assert db.select_one("resumes", user_id="u1")["ats_score"] == 0


def test_load_resume_missing_and_anonymous(store):
    assert resumes.load_resume(store, "nobody") == {"data": None}
    assert resumes.save_resume(store, "", ResumeDocument()) == {"error": "Not authenticated"}


# ── jobs ────────────────────────────────────────────────────────────────


def post(store, user, title="Data Engineer", **kw):
    return jobs.create_job(
        store, user, title=title, company="Acme", description="Pipelines",
        required_skills=kw.pop("required_skills", ["Python", "SQL"]), **kw,
    )


def test_only_recruiters_create_jobs(store, recruiter, candidate):
    assert post(store, candidate) == {"error": "Only recruiters can create job postings"}
    job = post(store, recruiter)["data"]
    assert job.status == "active"
    assert job.recruiter_id == recruiter


def test_create_job_validates_input(store, recruiter):
    assert "error" in post(store, recruiter, status="archived")
    assert "error" in post(store, recruiter, title="  ")
    assert post(store, "", title="x") == {"error": "Not authenticated"}


def test_active_jobs_exclude_closed_and_drafts(store, recruiter):
    live = post(store, recruiter, title="Live")["data"]
    post(store, recruiter, title="Draft", status="draft")
    closed = post(store, recruiter, title="Closing")["data"]
    jobs.toggle_job_status(store, recruiter, closed.id, "closed")
    assert [j.id for j in jobs.get_active_jobs(store)["data"]] == [live.id]
    assert len(jobs.get_recruiter_jobs(store, recruiter)["data"]) == 3


def test_job_mutations_are_owner_scoped(store, recruiter):
    profiles.save_profile(store, "rec-2", email="b@corp.io", role="recruiter")
    job = post(store, recruiter)["data"]
    assert jobs.update_job(store, "rec-2", job.id, title="Hijacked") == {"error": "Job not found"}
    assert jobs.delete_job(store, "rec-2", job.id) == {"error": "Job not found"}

    updated = jobs.update_job(store, recruiter, job.id, title="Senior Data Engineer", required_skills=[" Go", ""])
    assert updated["data"].title == "Senior Data Engineer"
    assert updated["data"].required_skills == ["Go"]
    assert "error" in jobs.update_job(store, recruiter, job.id, recruiter_id="rec-2")
    assert "error" in jobs.toggle_job_status(store, recruiter, job.id, "draft")
    assert jobs.delete_job(store, recruiter, job.id) == {"data": {"id": job.id}}


def test_job_matches_use_profile_skills(store, recruiter, candidate):
    post(store, recruiter, title="Analyst", required_skills=["SQL", "Excel"])
    post(store, recruiter, title="Engineer", required_skills=["python", "sql"])
    profiles.update_skills(store, candidate, ["Python", "SQL"])

    matches = jobs.get_job_matches(store, candidate)["data"]
    assert [(m.job.title, m.percentage) for m in matches] == [("Engineer", 100), ("Analyst", 50)]
    assert matches[0].match.matched_skills == ["python", "sql"]
    assert [m.job.title for m in jobs.get_job_matches(store, candidate, min_match=60)["data"]] == ["Engineer"]
    assert "error" in jobs.get_job_matches(store, candidate, sort_by="salary")


# ── tracker ─────────────────────────────────────────────────────────────


def test_new_application_defaults_to_wishlist(store):
    app = tracker.add_application(store, "u1", company="Acme", role="SRE")["data"]
    assert app.status == "wishlist"
    assert app.date_applied
    assert tracker.add_application(store, "u1", company="Acme", role="SRE", status="applied")["data"].status == "applied"


def test_add_application_validation(store):
    assert "error" in tracker.add_application(store, "u1", company="Acme", role="SRE", status="ghosted")
    assert "error" in tracker.add_application(store, "u1", company=" ", role="SRE")
    assert tracker.add_application(store, "", company="Acme", role="SRE") == {"error": "Not authenticated"}


def test_any_status_can_move_to_any_other(store):
    app = tracker.add_application(store, "u1", company="Acme", role="SRE")["data"]
    for status in ("offer", "rejected", "applied", "wishlist", "interview"):
        moved = tracker.update_status(store, "u1", app.id, status)["data"]
        assert moved.status == status
    assert "error" in tracker.update_status(store, "u1", app.id, "hired")


def test_applications_are_user_scoped(store):
    app = tracker.add_application(store, "u1", company="Acme", role="SRE")["data"]
    assert tracker.update_status(store, "u2", app.id, "offer") == {"error": "Application not found"}
    assert tracker.delete_application(store, "u2", app.id) == {"error": "Application not found"}
    assert tracker.get_applications(store, "u2") == {"data": []}
    assert tracker.delete_application(store, "u1", app.id) == {"data": {"id": app.id}}
    assert tracker.get_applications(store, "u1") == {"data": []}


def test_get_applications_newest_first(store):
    for i, day in enumerate(("2024-03-01", "2024-05-01", "2024-04-01")):
        store.insert("applications", {
            "user_id": "u1", "company": f"C{i}", "role": "Dev",
            "status": "applied", "date_applied": f"{day}T00:00:00+00:00",
        })
    apps = tracker.get_applications(store, "u1")["data"]
    assert [a.company for a in apps] == ["C1", "C2", "C0"]
    assert tracker.get_applications(store, "") == {"error": "Not authenticated", "data": []}


def test_transition_and_board():
    app = Application(id="a", user_id="u", company="Acme", role="SRE", status="rejected")
    moved = tracker.transition(app, "applied")
    assert moved.status == "applied"
    assert app.status == "rejected"
    with pytest.raises(ValueError):
        tracker.transition(app, "archived")

    board = tracker.group_by_status([moved, app])
    assert list(board) == ["wishlist", "applied", "interview", "offer", "rejected"]
    assert board["applied"] == [moved]
    assert board["rejected"] == [app]
    assert board["offer"] == []


def test_load_resume_reports_unparseable_backend_reply():
    session = FakeSession(FakeResponse(text="<html>"))
    db = SupabaseStore("https://proj.supabase.co", "anon-key", session=session)
    assert resumes.load_resume(db, "u1") == {"error": "GET resumes: invalid JSON response"}
