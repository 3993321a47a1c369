"""Data models for resumes, profiles, job postings and applications."""
from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any

PROFILE_ROLES: tuple[str, ...] = ("candidate", "recruiter")
JOB_STATUSES: tuple[str, ...] = ("active", "closed", "draft")
APPLICATION_STATUSES: tuple[str, ...] = ("wishlist", "applied", "interview", "offer", "rejected")


def generate_id() -> str:
    """Fresh identifier for a resume entry; never reused."""
    return uuid.uuid4().hex[:16]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_skill(label: str) -> str:
    return (label or "").strip().lower()


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


# ── Resume content ──────────────────────────────────────────────────────
#
# Stored as JSON with camelCase keys so documents written by other clients
# of the same backend load unchanged.


@dataclass
class PersonalInfo:
    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    website: str = ""

    _KEYS = {"full_name": "fullName"}

    def values(self) -> list[str]:
        return [getattr(self, f.name) for f in fields(self)]

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PersonalInfo:
        data = data or {}
        return cls(**{f.name: _str(data.get(cls._KEYS.get(f.name, f.name))) for f in fields(cls)})

    def to_dict(self) -> dict[str, Any]:
        return {self._KEYS.get(k, k): v for k, v in asdict(self).items()}


@dataclass
class Experience:
    id: str = field(default_factory=generate_id)
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Experience:
        return cls(
            id=_str(data.get("id")) or generate_id(),
            title=_str(data.get("title")),
            company=_str(data.get("company")),
            location=_str(data.get("location")),
            start_date=_str(data.get("startDate")),
            end_date=_str(data.get("endDate")),
            current=bool(data.get("current", False)),
            description=_str(data.get("description")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "company": self.company,
            "location": self.location,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "current": self.current,
            "description": self.description,
        }


@dataclass
class Education:
    id: str = field(default_factory=generate_id)
    degree: str = ""
    school: str = ""
    location: str = ""
    graduation_date: str = ""
    gpa: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Education:
        return cls(
            id=_str(data.get("id")) or generate_id(),
            degree=_str(data.get("degree")),
            school=_str(data.get("school")),
            location=_str(data.get("location")),
            graduation_date=_str(data.get("graduationDate")),
            gpa=_str(data.get("gpa")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "degree": self.degree,
            "school": self.school,
            "location": self.location,
            "graduationDate": self.graduation_date,
            "gpa": self.gpa,
        }


@dataclass
class Certification:
    id: str = field(default_factory=generate_id)
    name: str = ""
    issuer: str = ""
    date: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Certification:
        return cls(
            id=_str(data.get("id")) or generate_id(),
            name=_str(data.get("name")),
            issuer=_str(data.get("issuer")),
            date=_str(data.get("date")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Project:
    id: str = field(default_factory=generate_id)
    name: str = ""
    description: str = ""
    technologies: list[str] = field(default_factory=list)
    link: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        return cls(
            id=_str(data.get("id")) or generate_id(),
            name=_str(data.get("name")),
            description=_str(data.get("description")),
            technologies=_str_list(data.get("technologies")),
            link=_str(data.get("link")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


SECTIONS: dict[str, type] = {
    "experience": Experience,
    "education": Education,
    "certifications": Certification,
    "projects": Project,
}


@dataclass
class ResumeDocument:
    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    summary: str = ""
    experience: list[Experience] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    certifications: list[Certification] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ResumeDocument:
        """Build from stored JSON; missing keys fall back to an empty resume."""
        data = data or {}
        doc = cls(
            personal_info=PersonalInfo.from_dict(data.get("personalInfo")),
            summary=_str(data.get("summary")),
            skills=_str_list(data.get("skills")),
        )
        for section, entry_cls in SECTIONS.items():
            raw = data.get(section)
            if isinstance(raw, list):
                setattr(doc, section, [entry_cls.from_dict(e) for e in raw if isinstance(e, dict)])
        return doc

    def to_dict(self) -> dict[str, Any]:
        return {
            "personalInfo": self.personal_info.to_dict(),
            "summary": self.summary,
            "experience": [e.to_dict() for e in self.experience],
            "education": [e.to_dict() for e in self.education],
            "skills": list(self.skills),
            "certifications": [c.to_dict() for c in self.certifications],
            "projects": [p.to_dict() for p in self.projects],
        }

    # -- editing --------------------------------------------------------

    def _section(self, section: str) -> list:
        if section not in SECTIONS:
            raise ValueError(f"Unknown resume section: {section!r}")
        return getattr(self, section)

    def add_entry(self, section: str, **values: Any) -> Any:
        """Append a new entry with a fresh id and return it."""
        entries = self._section(section)
        values.pop("id", None)
        entry = SECTIONS[section](**values)
        entries.append(entry)
        return entry

    def update_entry(self, section: str, entry_id: str, **changes: Any) -> bool:
        if "id" in changes:
            raise ValueError("Entry ids cannot be changed")
        entries = self._section(section)
        for i, entry in enumerate(entries):
            if entry.id == entry_id:
                entries[i] = replace(entry, **changes)
                return True
        return False

    def remove_entry(self, section: str, entry_id: str) -> bool:
        entries = self._section(section)
        kept = [e for e in entries if e.id != entry_id]
        removed = len(kept) != len(entries)
        entries[:] = kept
        return removed

    def add_skill(self, label: str) -> bool:
        label = (label or "").strip()
        if not label or label in self.skills:
            return False
        self.skills.append(label)
        return True

    def remove_skill(self, label: str) -> bool:
        if label not in self.skills:
            return False
        self.skills = [s for s in self.skills if s != label]
        return True


# ── Records ─────────────────────────────────────────────────────────────


@dataclass
class Profile:
    id: str
    email: str
    role: str = "candidate"
    full_name: str | None = None
    skills: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Profile:
        return cls(
            id=row["id"],
            email=row.get("email") or "",
            role=row.get("role") or "candidate",
            full_name=row.get("full_name"),
            skills=_str_list(row.get("skills")),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class Resume:
    id: str
    user_id: str
    content: ResumeDocument
    ats_score: int = 0
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Resume:
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            content=ResumeDocument.from_dict(row.get("content")),
            ats_score=int(row.get("ats_score") or 0),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class JobPosting:
    id: str
    recruiter_id: str
    title: str
    company: str
    description: str
    required_skills: list[str] = field(default_factory=list)
    status: str = "active"
    location: str | None = None
    salary_range: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> JobPosting:
        return cls(
            id=row["id"],
            recruiter_id=row["recruiter_id"],
            title=row.get("title") or "",
            company=row.get("company") or "",
            description=row.get("description") or "",
            required_skills=_str_list(row.get("required_skills")),
            status=row.get("status") or "active",
            location=row.get("location"),
            salary_range=row.get("salary_range"),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class Application:
    id: str
    user_id: str
    company: str
    role: str
    status: str = "wishlist"
    salary: str | None = None
    date_applied: str = ""
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Application:
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            company=row.get("company") or "",
            role=row.get("role") or "",
            status=row.get("status") or "wishlist",
            salary=row.get("salary"),
            date_applied=row.get("date_applied") or row.get("created_at") or "",
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


# ── Derived ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MatchResult:
    percentage: int
    matched_skills: list[str]


@dataclass
class JobMatch:
    job: JobPosting
    match: MatchResult

    @property
    def percentage(self) -> int:
        return self.match.percentage
