from __future__ import annotations

import json

import pytest

from jobcraft import cli
from jobcraft.config import _ENV_MAP, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in _ENV_MAP:
        monkeypatch.delenv(key, raising=False)
    settings = Settings(data_dir=tmp_path / "data", reports_dir=tmp_path / "reports")
    monkeypatch.setattr(cli, "load_settings", lambda: settings)


def test_score_command(tmp_path, capsys):
    path = tmp_path / "resume.yaml"
    path.write_text(
        "personalInfo:\n  fullName: Ada\n  email: ada@x.io\n  phone: '1'\n"
        "  location: London\n  linkedin: in/ada\n  website: ada.dev\n"
        "skills: [Python, SQL]\n",
        encoding="utf-8",
    )
    assert cli.main(["score", str(path)]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["score"] == 23
    assert out["breakdown"]["skills"] == 3.0


def test_match_command(capsys):
    assert cli.main(["match", "--skills", "React, node", "--job-skills", "react,Go"]) == 0
    assert json.loads(capsys.readouterr().out) == {"percentage": 50, "matchedSkills": ["react"]}


def test_enhance_without_api_key_fails(capsys):
    assert cli.main(["enhance", "Built things"]) == 1
    assert "GROQ_API_KEY" in capsys.readouterr().err


def test_report_command_on_empty_store(capsys):
    assert cli.main(["report", "--user", "u1", "--write"]) == 0
    assert "# Welcome" in capsys.readouterr().out
