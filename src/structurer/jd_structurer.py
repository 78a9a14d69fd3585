"""
LLM-based job description structuring.

Turns free-form JD text into a StructuredJobDescription, renders the
plain-text description shown to candidates, and reports which required
fields still need to be filled in by hand.
"""

import json
from typing import Any, Mapping, Optional

from loguru import logger

from extractor.documents import DocumentTextExtractor, Source
from shared.completion import CompletionService, require_configured
from shared.json_extract import extract_json_object
from shared.models import EMPLOYMENT_TYPES, JobDraft, StructuredJobDescription, as_text


DEFAULT_TITLE = "Job Position"

# Field -> label shown to the recruiter when the field is empty.
REQUIRED_FIELDS = {
    "location": "Location",
    "salary": "Stipend/Salary Range",
    "experience": "Experience Level",
    "required_skills": "Required Skills",
    "preferred_skills": "Preferred Skills",
    "roles_and_responsibilities": "Responsibilities",
    "eligibility": "Eligibility",
}

SYSTEM_PROMPT = """You are an expert HR document parser. You read job descriptions and return their content as structured JSON, accurately and without inventing information.

IMPORTANT: Respond ONLY with valid JSON in the exact format specified. No other text."""

_SCHEMA_EXAMPLE = json.dumps(
    {
        "title": "string",
        "rolesAndResponsibilities": ["string"],
        "eligibility": ["string"],
        "requiredSkills": ["string"],
        "preferredSkills": ["string"],
        "experience": "string",
        "education": "string",
        "location": "string",
        "employmentType": "string",
        "salary": "string",
        "benefits": ["string"],
        "additionalInfo": "string",
    },
    indent=2,
)


def build_structuring_prompt(jd_text: str) -> str:
    """Prompt asking for the canonical JD schema, with the extraction rules."""
    employment_types = '", "'.join(EMPLOYMENT_TYPES)
    return f"""## Job Description Text:
{jd_text}

## Task:
Structure this job description into JSON with these EXACT field names:

{_SCHEMA_EXAMPLE}

## Extraction Rules:
1. "title": the position name only (e.g. "Senior Software Engineer"). Never include job IDs, reference numbers or company names.
2. "location": work location(s), e.g. "Bangalore, India", "Remote", "Hybrid - Mumbai". List all if several.
3. "employmentType": exactly one of "{employment_types}". Use "" if not stated.
4. "experience": a short summary of the years required, e.g. "2-4 years", "5+ years", "Fresher".
5. "education": the minimum degree or field of study, e.g. "Bachelor's in Computer Science". Use "" if not stated.
6. "salary": compensation as written, e.g. "$80,000-$100,000", "Competitive". Use "" if not stated.
7. "eligibility": FORMAL QUALIFICATIONS ONLY, one per item: degrees, certifications, years of experience (e.g. "Bachelor's degree in Computer Science or related field", "Minimum 3 years of professional software development experience", "AWS Certified Solutions Architect").
   Soft skills and personality traits ("Self-driven", "Critical thinker", "Problem solver", "Detail-oriented", "Fast learner") are NOT eligibility criteria. Put them in "rolesAndResponsibilities" or leave them out.
8. "requiredSkills": must-have technical and professional skills, one per item (languages, frameworks, tools, methodologies). No soft skills.
9. "preferredSkills": nice-to-have skills, often marked "preferred", "nice to have", "plus" or "bonus".
10. "rolesAndResponsibilities": what the person will do, each a clear complete sentence. Desired working qualities may go here.
11. "benefits": perks and extras such as insurance, leave, flexible hours, learning budget, bonuses, stock options.
12. "additionalInfo": only information that fits nowhere else, such as application deadlines or start-date constraints. Never job IDs or repeats of other fields. Use "" if nothing remains.

## Output Rules:
- Use "" for missing strings and [] for missing arrays.
- Arrays contain plain strings, never objects.
- Do not make up information that is not in the text.
- Return ONLY the JSON object, no markdown and no extra text."""


def _numbered(items: list[str]) -> str:
    return "\n".join(f"{idx}. {item}" for idx, item in enumerate(items, start=1))


def _bulleted(items: list[str]) -> str:
    return "\n".join(f"• {item}" for item in items)


def format_description(jd: StructuredJobDescription) -> str:
    """Render the structured JD as the plain-text description stored on the job."""
    sections = []

    overview = [
        f"{label}: {value}"
        for label, value in (
            ("Experience Required", jd.experience),
            ("Education", jd.education),
            ("Location", jd.location),
            ("Employment Type", jd.employment_type),
            ("Salary", jd.salary),
        )
        if value
    ]
    if overview:
        sections.append("\n".join(overview))

    if jd.eligibility:
        sections.append(f"Eligibility Criteria:\n{_numbered(jd.eligibility)}")
    if jd.roles_and_responsibilities:
        sections.append(f"Roles and Responsibilities:\n{_numbered(jd.roles_and_responsibilities)}")
    if jd.required_skills:
        sections.append(f"Required Skills:\n{_bulleted(jd.required_skills)}")
    if jd.preferred_skills:
        sections.append(f"Preferred Skills:\n{_bulleted(jd.preferred_skills)}")
    if jd.benefits:
        sections.append(f"Benefits:\n{_bulleted(jd.benefits)}")
    if jd.additional_info:
        sections.append(f"Additional Information:\n{jd.additional_info}")

    return "\n\n".join(sections).strip()


def missing_required_fields(jd: StructuredJobDescription) -> list[str]:
    """Labels of required fields that are empty, in display order."""
    missing = []
    for field_name, label in REQUIRED_FIELDS.items():
        value = getattr(jd, field_name)
        if isinstance(value, list):
            if not any(item.strip() for item in value):
                missing.append(label)
        elif not value.strip():
            missing.append(label)
    return missing


def merge_overrides(
    extracted: StructuredJobDescription,
    overrides: Optional[Mapping[str, Any]],
) -> StructuredJobDescription:
    """
    Overlay manually entered fields on an extracted JD.

    Keys may be camelCase or snake_case. A key that is absent or None keeps
    the extracted value; any other value replaces it.
    """
    if not overrides:
        return extracted

    fields = StructuredJobDescription.model_fields
    by_alias = {info.alias: name for name, info in fields.items() if info.alias}

    merged = extracted.model_dump()
    for key, value in overrides.items():
        name = by_alias.get(key, key)
        if name not in fields:
            logger.debug(f"Ignoring unknown JD override: {key}")
            continue
        if value is not None:
            merged[name] = value

    return StructuredJobDescription.model_validate(merged)


def parse_structured_reply(reply: str) -> StructuredJobDescription:
    """Normalize a raw LLM reply into the canonical JD schema (fails closed)."""
    payload = extract_json_object(reply)
    return StructuredJobDescription.model_validate(payload)


class JobStructurer:
    """Structures job descriptions using the completion service."""

    def __init__(
        self,
        completion: CompletionService,
        extractor: Optional[DocumentTextExtractor] = None,
    ):
        self.completion = completion
        self.extractor = extractor or DocumentTextExtractor()

    async def structure(self, jd_text: str) -> StructuredJobDescription:
        """
        Structure raw JD text.

        Raises:
            AIUnavailableError: completion service is not configured
            MalformedAIResponseError: reply had no parseable JSON object
        """
        require_configured(self.completion, "JD extraction")

        logger.info(f"Structuring job description ({len(jd_text)} characters)")
        reply = await self.completion.complete(
            build_structuring_prompt(jd_text),
            system_prompt=SYSTEM_PROMPT,
        )
        logger.debug(f"Structuring reply length: {len(reply)} characters")

        structured = parse_structured_reply(reply)
        logger.info(f"Structured JD: {structured.title or DEFAULT_TITLE}")
        return structured

    async def structure_document(
        self,
        source: Source,
        media_type: str,
        overrides: Optional[Mapping[str, Any]] = None,
        description: Optional[str] = None,
    ) -> JobDraft:
        """
        Extract, structure and validate an uploaded JD file.

        Manual ``overrides`` win over extracted values, and a non-blank
        ``description`` replaces the one rendered from the structured fields.
        The returned draft lists the required fields that are still empty.
        """
        jd_text = await self.extractor.extract(source, media_type)
        structured = merge_overrides(await self.structure(jd_text), overrides)

        draft = JobDraft(
            title=structured.title or DEFAULT_TITLE,
            description=as_text(description) or format_description(structured),
            structured_jd=structured,
            missing_fields=missing_required_fields(structured),
        )
        if not draft.is_complete:
            logger.warning(
                f"JD '{draft.title}' is missing required fields: {', '.join(draft.missing_fields)}"
            )
        return draft
