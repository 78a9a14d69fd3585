"""
Pydantic models for job descriptions, resumes and ATS scores.

Python attributes are snake_case; the canonical wire schema is camelCase
and is produced with ``model_dump(by_alias=True)``.
"""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator


EMPLOYMENT_TYPES = ("Full-time", "Part-time", "Contract", "Internship", "Temporary")

_EMPLOYMENT_LOOKUP = {re.sub(r"[\s_-]", "", t.lower()): t for t in EMPLOYMENT_TYPES}


def as_text(value: Any) -> str:
    """Coerce an LLM-supplied scalar to a stripped string, never None."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(as_list(value))
    return str(value).strip()


def as_list(value: Any) -> list[str]:
    """Coerce an LLM-supplied array to a list of non-blank strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        value = [value]
    items = []
    for item in value:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            items.append(text)
    return items


def normalize_employment_type(value: Any) -> str:
    """Map free-form employment type onto the closed enumeration, else ''."""
    text = as_text(value)
    if not text:
        return ""
    canonical = _EMPLOYMENT_LOOKUP.get(re.sub(r"[\s_-]", "", text.lower()))
    if canonical is None:
        logger.warning(f"Dropping unrecognised employment type: {text!r}")
        return ""
    return canonical


class CanonicalModel(BaseModel):
    """Accepts both snake_case and camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)


class RawDocument(CanonicalModel):
    """An uploaded document as handed to us by the uploader."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    identifier: str = Field(..., description="Stable document ID (e.g. stored filename)")
    media_type: str = Field(..., alias="mediaType", description="Declared MIME type")
    path: Path = Field(..., description="Where the bytes live")
    owner_id: Optional[str] = Field(
        default=None, alias="ownerId", description="Job or application the document belongs to"
    )


class ExtractedText(CanonicalModel):
    """Plain text decoded from a RawDocument."""

    source_id: str = Field(..., alias="sourceId")
    media_type: str = Field(..., alias="mediaType")
    text: str = Field(default="")


class StructuredJobDescription(CanonicalModel):
    """Canonical normalized job description."""

    title: str = Field(default="")
    roles_and_responsibilities: list[str] = Field(
        default_factory=list, alias="rolesAndResponsibilities"
    )
    eligibility: list[str] = Field(default_factory=list)
    required_skills: list[str] = Field(default_factory=list, alias="requiredSkills")
    preferred_skills: list[str] = Field(default_factory=list, alias="preferredSkills")
    experience: str = Field(default="")
    education: str = Field(default="")
    location: str = Field(default="")
    employment_type: str = Field(default="", alias="employmentType")
    salary: str = Field(default="")
    benefits: list[str] = Field(default_factory=list)
    additional_info: str = Field(default="", alias="additionalInfo")

    @field_validator(
        "roles_and_responsibilities",
        "eligibility",
        "required_skills",
        "preferred_skills",
        "benefits",
        mode="before",
    )
    @classmethod
    def _lists(cls, value: Any) -> list[str]:
        return as_list(value)

    @field_validator(
        "title",
        "experience",
        "education",
        "location",
        "salary",
        "additional_info",
        mode="before",
    )
    @classmethod
    def _strings(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("employment_type", mode="before")
    @classmethod
    def _employment_type(cls, value: Any) -> str:
        return normalize_employment_type(value)


class JobPosting(CanonicalModel):
    """A job as seen by the scoring path."""

    id: Optional[str] = Field(default=None)
    title: str = Field(default="")
    description: str = Field(default="")
    structured_jd: StructuredJobDescription = Field(
        default_factory=StructuredJobDescription, alias="structuredJD"
    )

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("structured_jd", mode="before")
    @classmethod
    def _structured(cls, value: Any) -> Any:
        return {} if value is None else value


class JobDraft(CanonicalModel):
    """Result of turning an uploaded JD file into a job, before it is saved."""

    title: str
    description: str
    structured_jd: StructuredJobDescription = Field(alias="structuredJD")
    missing_fields: list[str] = Field(default_factory=list, alias="missingFields")

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields


class ATSScoreRecord(CanonicalModel):
    """Normalized match score of one resume against one job."""

    score: int = Field(..., ge=0, le=100)
    analysis: str = Field(default="Analysis completed.")
    matched_skills: list[str] = Field(default_factory=list, alias="matchedSkills")
    missing_skills: list[str] = Field(default_factory=list, alias="missingSkills")
    strengths: list[str] = Field(default_factory=list)
    recommendations: str = Field(default="")
    interview_focus: list[str] = Field(default_factory=list, alias="interviewFocus")
    training_needs: list[str] = Field(default_factory=list, alias="trainingNeeds")
    calculated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="calculatedAt"
    )


class Application(CanonicalModel):
    """A candidate's application to a job."""

    id: str
    candidate_name: str = Field(default="", alias="fullname")
    resume: RawDocument
    submitted_at: Optional[datetime] = Field(default=None, alias="createdAt")
    ats_score: Optional[ATSScoreRecord] = Field(default=None, alias="atsScore")


class BulkScoringResult(CanonicalModel):
    """Outcome of scoring one application inside a bulk run."""

    application_id: str = Field(..., alias="applicationId")
    ats_score: Optional[ATSScoreRecord] = Field(default=None, alias="atsScore")
    error: Optional[str] = Field(default=None)
    success: bool = Field(default=True)
