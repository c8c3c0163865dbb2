"""Typed, read-only record of the portfolio knowledge corpus."""

from pydantic import BaseModel, ConfigDict


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class About(_Frozen):
    summary: str
    values: list[str]


class Project(_Frozen):
    name: str
    category: str
    description: str
    tech: list[str]
    highlights: list[str]


class Experience(_Frozen):
    company: str
    title: str
    period: str
    responsibilities: list[str]
    short_name: str | None = None
    note: str | None = None


class LanguageSkill(_Frozen):
    name: str
    level: str
    description: str


class Skills(_Frozen):
    languages: list[LanguageSkill]
    frameworks: list[str]
    concepts: list[str]


class Education(_Frozen):
    institution: str
    qualification: str
    achievement: str
    subjects: list[str] | None = None


class Interests(_Frozen):
    software: list[str]
    music: list[str]


class PortfolioSection(_Frozen):
    title: str
    description: str


class Knowledge(_Frozen):
    """The whole corpus. Portfolio sections keep their camelCase keys in declaration order."""

    about: About
    projects: list[Project]
    experience: list[Experience]
    skills: Skills
    education: list[Education]
    interests: Interests
    portfolio: dict[str, PortfolioSection]
