"""Markdown dashboard: resume score, top job matches and application board."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jobcraft.log import get_logger
from jobcraft.matcher import MODERATE_MATCH, match_jobs, match_tier
from jobcraft.models import Application, JobPosting, Profile, Resume
from jobcraft.scorer import score_breakdown
from jobcraft.tracker import STATUS_LABELS, group_by_status

log = get_logger(__name__)

TOP_MATCHES = 4

_TIER_BADGES: dict[str, str] = {
    "strong": "\U0001f7e2",
    "moderate": "\U0001f7e1",
    "low": "⚪",
}


def _clip(text: str, width: int) -> str:
    return text[:width] + ("…" if len(text) > width else "")


def _points(value: float) -> str:
    return f"{value:g}"


def build_dashboard_report(
    profile: Profile | None,
    resume: Resume | None,
    jobs: list[JobPosting],
    applications: list[Application],
) -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    name = (profile.full_name or "").split(" ")[0] if profile and profile.full_name else "Welcome"
    skills = profile.skills if profile else []

    matches = match_jobs(skills, jobs)
    top = matches[:TOP_MATCHES]
    strong = sum(1 for m in top if m.percentage >= MODERATE_MATCH)
    ats = resume.ats_score if resume else 0

    lines: list[str] = [f"# {name} — Dashboard {date}", ""]
    lines.append(
        f"**ATS score:** {ats}% | **Skills:** {len(skills)} | "
        f"**Job matches:** {strong} | **Open positions:** {len(jobs)}"
    )
    lines.append("")

    if resume:
        lines.append("## Resume Score")
        lines.append("")
        lines.append("| Category | Points | Max |")
        lines.append("|----------|-------:|----:|")
        for label, points, cap in score_breakdown(resume.content).as_rows():
            lines.append(f"| {label} | {_points(points)} | {cap} |")
        lines.append(f"| **Total** | **{resume.ats_score}** | 100 |")
        lines.append("")
    else:
        lines.append("_No resume saved yet — build one to get an ATS score._")
        lines.append("")

    if top:
        lines.append("## Top Matches")
        lines.append("")
        lines.append("| # | Role | Company | Location | Match | Matched skills |")
        lines.append("|--:|------|---------|----------|------:|----------------|")
        for i, m in enumerate(top, 1):
            badge = _TIER_BADGES[match_tier(m.percentage)]
            loc = (m.job.location or "—").split(",")[0][:18]
            matched = ", ".join(m.match.matched_skills[:4]) or "—"
            lines.append(
                f"| {i} | {_clip(m.job.title, 40)} | {_clip(m.job.company, 22)} | {loc} "
                f"| {badge} {m.percentage}% | {matched} |"
            )
        lines.append("")
        if not skills:
            lines.append("_Add skills to your profile for better matching._")
            lines.append("")

    if applications:
        board = group_by_status(applications)
        lines.append("---")
        lines.append("")
        lines.append("## Application Board")
        lines.append("")
        for status, apps in board.items():
            label = STATUS_LABELS.get(status, status.title())
            lines.append(f"### {label} ({len(apps)})")
            for a in apps[:10]:
                salary = f" — {a.salary}" if a.salary else ""
                lines.append(f"- **{a.role}** @ {a.company}{salary} — {a.date_applied[:10]}")
            lines.append("")

    log.info("Built dashboard report: %d jobs, %d applications", len(jobs), len(applications))
    return "\n".join(lines)


def write_report(content: str, reports_dir: Path) -> Path:
    reports_dir = Path(reports_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    path = reports_dir / f"dashboard_{date}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
