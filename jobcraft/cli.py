"""Command-line entry point.

  jobcraft score resume.yaml
  jobcraft match --skills "Python, SQL" --job-skills "python,docker"
  jobcraft enhance "Built dashboards" --type experience
  jobcraft suggest-skills "Data Engineer" --skills "Python"
  jobcraft analyze --title "Data Engineer" --description job.txt --skills "Python"
  jobcraft report --user <user-id>
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import yaml

from jobcraft.ai import ENHANCE_TYPES, AIEnhancer
from jobcraft.config import ConfigError, load_settings
from jobcraft.log import get_logger
from jobcraft.matcher import calculate_match_percentage
from jobcraft.models import ResumeDocument
from jobcraft.scorer import score_breakdown
from jobcraft.stores import StoreError

log = get_logger(__name__)


def _split(raw: str) -> list[str]:
    return [s.strip() for s in (raw or "").split(",") if s.strip()]


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _emit(result: dict[str, Any]) -> int:
    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1
    _print_json(result["data"])
    return 0


def load_resume_file(path: Path) -> ResumeDocument:
    """Read a resume document from YAML or JSON (same camelCase keys)."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must contain a mapping")
    return ResumeDocument.from_dict(data)


def _read_text_arg(value: str) -> str:
    p = Path(value)
    if len(value) < 256 and p.is_file():
        return p.read_text(encoding="utf-8")
    return value


def cmd_score(args: argparse.Namespace) -> int:
    breakdown = score_breakdown(load_resume_file(Path(args.file)))
    _print_json({"score": breakdown.total, "breakdown": asdict(breakdown)})
    return 0


def cmd_match(args: argparse.Namespace) -> int:
    result = calculate_match_percentage(_split(args.skills), _split(args.job_skills))
    _print_json({"percentage": result.percentage, "matchedSkills": result.matched_skills})
    return 0


def cmd_enhance(args: argparse.Namespace) -> int:
    ai = AIEnhancer.from_settings(load_settings())
    result = ai.enhance_description(_read_text_arg(args.text), args.type)
    if "error" in result:
        return _emit(result)
    print(result["data"])
    return 0


def cmd_suggest(args: argparse.Namespace) -> int:
    ai = AIEnhancer.from_settings(load_settings())
    return _emit(ai.generate_skill_suggestions(args.title, _split(args.skills)))


def cmd_analyze(args: argparse.Namespace) -> int:
    ai = AIEnhancer.from_settings(load_settings())
    return _emit(ai.analyze_job_match(_split(args.skills), _read_text_arg(args.description), args.title))


def cmd_report(args: argparse.Namespace) -> int:
    from jobcraft.jobs import get_active_jobs
    from jobcraft.profiles import get_profile
    from jobcraft.report import build_dashboard_report, write_report
    from jobcraft.resumes import load_resume
    from jobcraft.stores import get_store
    from jobcraft.tracker import get_applications

    settings = load_settings()
    store = get_store(settings)
    results = [
        get_profile(store, args.user),
        load_resume(store, args.user),
        get_active_jobs(store),
        get_applications(store, args.user),
    ]
    for r in results:
        if "error" in r:
            return _emit(r)
    profile, resume, jobs, apps = (r["data"] for r in results)
    content = build_dashboard_report(profile, resume, jobs, apps)
    if args.write:
        path = write_report(content, settings.reports_dir)
        log.info("Report: %s", path)
    print(content)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobcraft", description=__doc__.split("\n\n")[0])
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("score", help="ATS score for a resume file (YAML or JSON)")
    p.add_argument("file")
    p.set_defaults(func=cmd_score)

    p = sub.add_parser("match", help="skill overlap between a candidate and a job")
    p.add_argument("--skills", default="", help="comma-separated candidate skills")
    p.add_argument("--job-skills", default="", help="comma-separated required skills")
    p.set_defaults(func=cmd_match)

    p = sub.add_parser("enhance", help="rewrite resume text with the LLM")
    p.add_argument("text", help="text or path to a text file")
    p.add_argument("--type", choices=ENHANCE_TYPES, default="experience")
    p.set_defaults(func=cmd_enhance)

    p = sub.add_parser("suggest-skills", help="skills worth adding for a job title")
    p.add_argument("title")
    p.add_argument("--skills", default="", help="comma-separated skills you already have")
    p.set_defaults(func=cmd_suggest)

    p = sub.add_parser("analyze", help="LLM analysis of fit for a job")
    p.add_argument("--title", default="")
    p.add_argument("--description", required=True, help="job description or path to it")
    p.add_argument("--skills", default="")
    p.set_defaults(func=cmd_analyze)

    p = sub.add_parser("report", help="Markdown dashboard for a user")
    p.add_argument("--user", required=True)
    p.add_argument("--write", action="store_true", help="also save under reports/")
    p.set_defaults(func=cmd_report)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except (ConfigError, StoreError, ValueError, OSError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
