"""
LLM-based ATS scoring of resumes against structured job descriptions.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from loguru import logger

from extractor.documents import CachedTextExtractor
from shared.completion import CompletionService, require_configured
from shared.config import Settings, get_settings
from shared.errors import MalformedAIResponseError
from shared.json_extract import extract_json_object
from shared.models import ATSScoreRecord, JobPosting, RawDocument, as_list, as_text


SYSTEM_PROMPT = """You are an expert ATS (Applicant Tracking System) analyzer and technical recruiter. Your task is to evaluate how well a candidate's resume matches a specific job and explain the result so HR can act on it.

IMPORTANT: Respond ONLY with valid JSON in the exact format specified. No other text."""

# Terminology treated as equivalent before matching.
SKILL_SYNONYMS = [
    ["React", "ReactJS", "React.js", "React Native"],
    ["JavaScript", "JS", "ECMAScript", "ES6", "ES2015+"],
    ["Node.js", "NodeJS", "Node", "Express.js"],
    ["Python", "Python3", "Py"],
    ["Database", "DB", "SQL", "MySQL", "PostgreSQL"],
    ["Docker", "Containerization", "Container"],
    ["Kubernetes", "K8s", "Container Orchestration"],
    ["CI/CD", "Continuous Integration", "Jenkins", "GitHub Actions"],
    ["AWS", "Amazon Web Services", "Cloud", "EC2", "S3"],
    ["Git", "Version Control", "GitHub", "GitLab"],
]

EXPERIENCE_BANDS = {
    "Junior": "0-2 years",
    "Mid-level": "3-5 years",
    "Senior": "5+ years",
    "Lead": "7+ years",
}

# Criterion -> weight in percent.
SCORING_RUBRIC = {
    "Technical skills match": 40,
    "Experience level match": 25,
    "Education and qualifications": 15,
    "Soft skills and cultural fit indicators": 10,
    "Overall resume quality and presentation": 10,
}

RECOMMENDATIONS = [
    "Strong candidate - Schedule interview immediately",
    "Good fit - Consider for interview",
    "Moderate match - Review carefully",
    "Not suitable for this role",
]

LIST_FIELDS = ("strengths", "interviewFocus", "trainingNeeds")
TRUNCATED_LIST_FIELDS = ("matchedSkills", "missingSkills")


def build_job_context(job: JobPosting) -> str:
    """Job title, description and every non-empty structured field."""
    jd = job.structured_jd
    sections = [f"**Title:** {job.title}"]

    if job.description:
        sections.append(f"**Description:**\n{job.description}")
    if jd.required_skills:
        sections.append(f"**Required Skills:** {', '.join(jd.required_skills)}")
    if jd.preferred_skills:
        sections.append(f"**Preferred Skills:** {', '.join(jd.preferred_skills)}")
    if jd.experience:
        sections.append(f"**Experience Required:** {jd.experience}")
    if jd.education:
        sections.append(f"**Education:** {jd.education}")
    if jd.eligibility:
        sections.append("**Eligibility:**\n" + "\n".join(f"- {item}" for item in jd.eligibility))
    if jd.roles_and_responsibilities:
        sections.append(
            "**Roles & Responsibilities:**\n"
            + "\n".join(f"- {item}" for item in jd.roles_and_responsibilities)
        )
    if jd.location:
        sections.append(f"**Location:** {jd.location}")
    if jd.employment_type:
        sections.append(f"**Employment Type:** {jd.employment_type}")
    if jd.salary:
        sections.append(f"**Salary:** {jd.salary}")
    if jd.benefits:
        sections.append(f"**Benefits:** {', '.join(jd.benefits)}")
    if jd.additional_info:
        sections.append(f"**Additional Information:** {jd.additional_info}")

    return "\n\n".join(sections)


def build_scoring_prompt(resume_text: str, job: JobPosting) -> str:
    """Prompt combining job requirements, resume, rubric and vocabulary."""
    synonyms = "\n".join(f"   - {' = '.join(group)}" for group in SKILL_SYNONYMS)
    bands = "\n".join(f'   - "{level}" = {years}' for level, years in EXPERIENCE_BANDS.items())
    rubric = "\n".join(f"   - {criterion} ({weight}%)" for criterion, weight in SCORING_RUBRIC.items())
    recommendations = " OR ".join(f"'{r}'" for r in RECOMMENDATIONS)

    return f"""## Job Posting:
{build_job_context(job)}

## Candidate Resume:
{resume_text}

## Instructions:
1. Skill synonym matching. Treat these variations as the same skill:
{synonyms}

2. Experience levels:
{bands}

3. Evaluate holistically: technical skills, years and level of experience, education and certifications, soft skills and cultural fit indicators, resume clarity, projects and achievements, domain knowledge.

4. Scoring criteria:
{rubric}

5. Give HR specific, actionable next steps.

## Task:
Respond in the following JSON format only:

{{
  "score": <number between 0-100>,
  "analysis": "<2-3 sentence analysis of the match>",
  "matchedSkills": ["skill1", "skill2"],
  "missingSkills": ["skill1", "skill2"],
  "strengths": ["strength1", "strength2"],
  "recommendations": "<one of: {recommendations}>",
  "interviewFocus": ["topic1", "topic2"],
  "trainingNeeds": ["skill1", "skill2"]
}}"""


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_score(raw: Any) -> int:
    """Clamp to 0-100 and round half up. Non-numeric scores are malformed."""
    if isinstance(raw, bool):
        raise MalformedAIResponseError(f"Invalid score in AI response: {raw!r}")
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise MalformedAIResponseError(f"Invalid score in AI response: {raw!r}") from e
    if math.isnan(value):
        raise MalformedAIResponseError("Invalid score in AI response: NaN")

    clamped = min(max(value, 0.0), 100.0)
    if clamped != value:
        logger.warning(f"Score {raw} out of range, clamping to 0-100")
    return round_half_up(clamped)


def normalize_score_record(
    payload: dict[str, Any],
    now: Optional[datetime] = None,
    skill_limit: int = 20,
) -> ATSScoreRecord:
    """
    Build the canonical score record from a parsed LLM reply.

    ``calculatedAt`` is always stamped here; any value in the reply is ignored.
    """
    record: dict[str, Any] = {
        "score": normalize_score(payload.get("score")),
        "analysis": as_text(payload.get("analysis")) or "Analysis completed.",
        "recommendations": as_text(payload.get("recommendations")),
        "calculatedAt": now or datetime.now(timezone.utc),
    }
    for name in TRUNCATED_LIST_FIELDS:
        record[name] = as_list(payload.get(name))[:skill_limit]
    for name in LIST_FIELDS:
        record[name] = as_list(payload.get(name))

    return ATSScoreRecord.model_validate(record)


class ATSScorer:
    """Scores resumes against jobs using the completion service."""

    def __init__(
        self,
        completion: CompletionService,
        text_extractor: Optional[CachedTextExtractor] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.completion = completion
        self.text_extractor = text_extractor or CachedTextExtractor(settings=self.settings)

    async def score_text(self, resume_text: str, job: JobPosting) -> ATSScoreRecord:
        """
        Score already-extracted resume text against ``job``.

        Raises:
            AIUnavailableError: completion service is not configured
            MalformedAIResponseError: reply had no usable JSON object
        """
        require_configured(self.completion, "ATS scoring")

        prompt = build_scoring_prompt(resume_text, job)
        logger.debug(
            f"Scoring resume ({len(resume_text)} chars) against '{job.title}' "
            f"(prompt {len(prompt)} chars)"
        )

        reply = await self.completion.complete(prompt, system_prompt=SYSTEM_PROMPT)
        payload = extract_json_object(reply)
        record = normalize_score_record(payload, skill_limit=self.settings.skill_list_limit)

        logger.info(
            f"Scored resume for {job.title}: score={record.score}, "
            f"matched={len(record.matched_skills)}, missing={len(record.missing_skills)}"
        )
        return record

    async def score_resume(self, document: RawDocument, job: JobPosting) -> ATSScoreRecord:
        """
        Extract (or reuse cached) resume text, then score it.

        Extraction errors propagate unchanged.
        """
        resume_text = await self.text_extractor.extract_document(document)
        return await self.score_text(resume_text, job)
