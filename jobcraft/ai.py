"""AI-assisted resume writing through a Groq-hosted LLM.

Every public method returns ``{"data": ...}`` or ``{"error": "..."}``;
provider exceptions never reach the caller.
"""
from __future__ import annotations

import json
import math
import threading
from abc import ABC, abstractmethod
from typing import Any

from jobcraft.config import Settings
from jobcraft.log import get_logger
from jobcraft.matcher import round_half_up
from jobcraft.models import normalize_skill
from jobcraft.retry import RetryCancelled, is_rate_limited, with_retry

log = get_logger(__name__)

BUSY_MESSAGE = "AI service is currently busy. Please wait a moment and try again."
CANCELLED_MESSAGE = "Request was cancelled."


class TextGenerator(ABC):
    """Text-generation provider: one prompt in, one completion out.

    Failures raise an exception exposing ``status_code`` when the provider
    reported one.
    """

    @abstractmethod
    def generate(self, prompt: str, *, model: str, temperature: float, max_tokens: int) -> str:
        pass


class GroqGenerator(TextGenerator):
    """Groq through its OpenAI-compatible endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.groq.com/openai/v1",
        timeout: float = 60.0,
    ) -> None:
        from openai import OpenAI

        # SDK-level retries off: backoff is handled by with_retry.
        # A cancel_event cannot interrupt a request already in flight, only the timeout ends it.
        self._client = OpenAI(api_key=api_key, base_url=base_url, max_retries=0, timeout=timeout)

    def generate(self, prompt: str, *, model: str, temperature: float, max_tokens: int) -> str:
        r = self._client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not r.choices:
            return ""
        return (r.choices[0].message.content or "").strip()


# ── Prompts ──────────────────────────────────────────────────────────────

_ENHANCE_PROMPTS: dict[str, str] = {
    "experience": """\
You are an expert resume writer. Enhance the following job experience description to be more impactful, professional, and ATS-friendly. Use strong action verbs, quantify achievements where possible, and keep it concise. Only return the enhanced description without any explanation or additional text.

Original description:
{text}

Enhanced description:""",
    "summary": """\
You are an expert resume writer. Rewrite the following professional summary to be compelling, concise (2-3 sentences), and highlight key strengths. Make it ATS-friendly. Only return the enhanced summary without any explanation or additional text.

Original summary:
{text}

Enhanced summary:""",
    "project": """\
You are an expert resume writer. Enhance the following project description to highlight technical skills, impact, and achievements. Keep it concise and professional. Only return the enhanced description without any explanation or additional text.

Original description:
{text}

Enhanced description:""",
}

ENHANCE_TYPES: tuple[str, ...] = tuple(_ENHANCE_PROMPTS)

_SKILLS_PROMPT = """\
Based on the job title "{job_title}", suggest 10 relevant technical and soft skills that would be valuable for this role. The person already has these skills: {current_skills}.

Return ONLY a JSON array of skill strings, no explanation. Example format:
["Skill 1", "Skill 2", "Skill 3"]"""

_MATCH_PROMPT = """\
Analyze how well a candidate matches this job:

Job Title: {job_title}
Job Description: {job_description}

Candidate's Skills: {user_skills}

Provide a brief analysis in JSON format:
{{
  "matchScore": <number 0-100>,
  "matchedSkills": ["skill1", "skill2"],
  "missingSkills": ["skill1", "skill2"],
  "recommendation": "brief 1-2 sentence recommendation"
}}

Return ONLY the JSON, no explanation."""


# ── JSON extraction ──────────────────────────────────────────────────────

_CLOSERS = {"[": "]", "{": "}"}


def _scan_runs(text: str, start: int) -> tuple[list[tuple[int, int]], int, bool]:
    """Scan the bracket run opened at *start*.

    Returns the ``(begin, end)`` spans of every run that closed on the way,
    the index where scanning stopped, and whether it stopped inside a string.
    The scan ends when the outer run closes, at a mismatched closer, or at
    the end of *text*.
    """
    runs: list[tuple[int, int]] = []
    stack: list[tuple[str, int]] = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append((_CLOSERS[ch], i))
        elif ch in ("]", "}"):
            if not stack or stack[-1][0] != ch:
                return runs, i + 1, False
            _, begin = stack.pop()
            runs.append((begin, i + 1))
            if not stack:
                return runs, i + 1, False
    return runs, len(text), in_string


def extract_json(text: str, opener: str) -> Any | None:
    """Parse the first balanced ``[...]`` or ``{...}`` run in *text*.

    Brackets inside JSON strings are ignored. A run that is balanced but
    not valid JSON is skipped in favour of the next one. Openers already
    covered by a scan are not rescanned, so unbalanced text costs one pass.
    """
    if opener not in _CLOSERS:
        raise ValueError(f"opener must be '[' or '{{', got {opener!r}")
    pos = text.find(opener)
    while pos != -1:
        runs, stop, in_string = _scan_runs(text, pos)
        for begin, end in sorted(runs):
            if text[begin] != opener:
                continue
            try:
                return json.loads(text[begin:end])
            except json.JSONDecodeError:
                continue
        # ending inside a string means *pos* itself sat in one; retry just past it
        pos = text.find(opener, pos + 1 if in_string else stop)
    return None


# ── Client ───────────────────────────────────────────────────────────────


class AIEnhancer:
    def __init__(self, generator: TextGenerator, settings: Settings) -> None:
        self.generator = generator
        self.settings = settings

    @classmethod
    def from_settings(cls, settings: Settings) -> AIEnhancer:
        if not settings.groq_api_key:
            raise ValueError("GROQ_API_KEY is not set")
        generator = GroqGenerator(settings.groq_api_key, settings.llm_base_url, settings.llm_timeout)
        return cls(generator, settings)

    def _complete(self, prompt: str, cancel_event: threading.Event | None) -> str:
        s = self.settings
        return with_retry(
            lambda: self.generator.generate(
                prompt,
                model=s.llm_model,
                temperature=s.temperature,
                max_tokens=s.max_tokens,
            ),
            max_attempts=s.retry_max_attempts,
            base_delay=s.retry_base_delay,
            cancel_event=cancel_event,
            name="llm completion",
        )

    @staticmethod
    def _failure(exc: Exception, generic: str) -> dict[str, str]:
        if isinstance(exc, RetryCancelled):
            log.info("LLM request cancelled: %s", exc)
            return {"error": CANCELLED_MESSAGE}
        log.error("LLM request failed: %s", exc)
        if is_rate_limited(exc):
            return {"error": BUSY_MESSAGE}
        return {"error": generic}

    def enhance_description(
        self,
        text: str,
        kind: str = "experience",
        *,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        if not (text or "").strip():
            return {"error": "Please provide some text to enhance"}
        if kind not in _ENHANCE_PROMPTS:
            return {"error": f"Unsupported enhancement type: {kind}"}

        prompt = _ENHANCE_PROMPTS[kind].format(text=text)
        try:
            enhanced = self._complete(prompt, cancel_event)
        except Exception as exc:
            return self._failure(exc, "Failed to enhance text. Please try again.")
        log.info("Enhanced %s text (%d → %d chars)", kind, len(text), len(enhanced))
        return {"data": enhanced.strip()}

    def generate_skill_suggestions(
        self,
        job_title: str,
        current_skills: list[str],
        *,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        if not (job_title or "").strip():
            return {"error": "Please provide a job title"}

        prompt = _SKILLS_PROMPT.format(
            job_title=job_title,
            current_skills=", ".join(current_skills) or "none listed",
        )
        try:
            raw = self._complete(prompt, cancel_event)
        except Exception as exc:
            return self._failure(exc, "Failed to generate skill suggestions. Please try again.")

        suggestions = extract_json(raw, "[")
        if not isinstance(suggestions, list):
            log.warning("No JSON array in skill suggestion reply: %.120r", raw)
            return {"error": "Failed to parse skill suggestions"}

        have = {normalize_skill(s) for s in current_skills}
        fresh = [
            s.strip() for s in suggestions
            if isinstance(s, str) and s.strip() and normalize_skill(s) not in have
        ]
        log.info("Skill suggestions for %r: %d new of %d", job_title, len(fresh), len(suggestions))
        return {"data": fresh}

    def analyze_job_match(
        self,
        user_skills: list[str],
        job_description: str,
        job_title: str,
        *,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        if not (job_description or "").strip():
            return {"error": "Please provide a job description"}

        prompt = _MATCH_PROMPT.format(
            job_title=job_title,
            job_description=job_description,
            user_skills=", ".join(user_skills) or "None listed",
        )
        try:
            raw = self._complete(prompt, cancel_event)
        except Exception as exc:
            return self._failure(exc, "Failed to analyze job match. Please try again.")

        analysis = _normalize_analysis(extract_json(raw, "{"))
        if analysis is None:
            log.warning("No usable JSON object in job match reply: %.120r", raw)
            return {"error": "Failed to analyze job match"}
        return {"data": analysis}


def _normalize_analysis(parsed: Any) -> dict[str, Any] | None:
    if not isinstance(parsed, dict):
        return None
    score = parsed.get("matchScore")
    if isinstance(score, str):
        try:
            score = float(score.strip().rstrip("%"))
        except ValueError:
            return None
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        return None

    def strings(key: str) -> list[str]:
        value = parsed.get(key)
        return [v for v in value if isinstance(v, str)] if isinstance(value, list) else []

    recommendation = parsed.get("recommendation")
    return {
        "matchScore": max(0, min(100, round_half_up(score))),
        "matchedSkills": strings("matchedSkills"),
        "missingSkills": strings("missingSkills"),
        "recommendation": recommendation if isinstance(recommendation, str) else "",
    }
