from __future__ import annotations

from typing import Any

import pytest

from jobcraft.ai import TextGenerator
from jobcraft.config import Settings
from jobcraft.models import Education, Experience, PersonalInfo, Project, Certification, ResumeDocument
from jobcraft.stores import LocalStore


class FakeGenerator(TextGenerator):
    """Replays scripted replies; an Exception in the script is raised."""

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def generate(self, prompt: str, *, model: str, temperature: float, max_tokens: int) -> str:
        self.calls.append(
            {"prompt": prompt, "model": model, "temperature": temperature, "max_tokens": max_tokens}
        )
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text
        if text:
            self.content = text.encode()
        else:
            self.content = b"" if payload is None else b"x"

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    """Stands in for requests.Session; an Exception in the script is raised."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        groq_api_key="test-key",
        retry_base_delay=0.0,
        data_dir=tmp_path / "data",
        reports_dir=tmp_path / "reports",
    )


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "data")


def words(n: int) -> str:
    return " ".join(f"word{i}" for i in range(n))


@pytest.fixture
def full_resume() -> ResumeDocument:
    """All six contact fields, 60-word summary, 3 detailed jobs, 2 schools,
    10 skills, 1 project and 1 certification."""
    return ResumeDocument(
        personal_info=PersonalInfo(
            full_name="Ada Lovelace",
            email="ada@example.com",
            phone="+44 20 7946 0000",
            location="London",
            linkedin="linkedin.com/in/ada",
            website="ada.dev",
        ),
        summary=words(60),
        experience=[Experience(title=f"Engineer {i}", description="x" * 60) for i in range(3)],
        education=[Education(degree="BSc"), Education(degree="MSc")],
        skills=[f"skill{i}" for i in range(10)],
        projects=[Project(name="Engine")],
        certifications=[Certification(name="AWS SA")],
    )
