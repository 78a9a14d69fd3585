"""
Matcher Service - Main entry point.
Scores one or more resumes against a job using the LLM ATS scorer.
"""

import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
import yaml
from loguru import logger

from extractor.documents import CachedTextExtractor, media_type_for_path
from ranker.ranking import rank_applications
from shared.completion import OpenAICompletionService
from shared.config import get_settings
from shared.errors import HiringCoreError
from shared.log import setup_logging
from shared.models import Application, ATSScoreRecord, JobPosting, RawDocument

from .ats_scorer import ATSScorer
from .bulk import BulkScorer, BulkScoringReport, apply_results


def load_job(path: Path) -> JobPosting:
    """Load a job from JSON or YAML (keys: title, description, structuredJD)."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    job = JobPosting.model_validate(data)
    if not job.id:
        job = job.model_copy(update={"id": path.stem})
    return job


def resume_document(path: Path) -> RawDocument:
    return RawDocument(
        identifier=str(path.resolve()),
        media_type=media_type_for_path(path),
        path=path,
    )


def build_scorer() -> ATSScorer:
    settings = get_settings()
    return ATSScorer(
        OpenAICompletionService(settings, temperature=0.3),
        text_extractor=CachedTextExtractor(settings=settings),
        settings=settings,
    )


async def score_single(job: JobPosting, resume: Path) -> ATSScoreRecord:
    """Score one resume; errors propagate to the caller."""
    logger.info(f"Scoring {resume.name} against {job.title}")
    return await build_scorer().score_resume(resume_document(resume), job)


async def score_bulk(
    job: JobPosting,
    resumes: list[Path],
    batch_size: Optional[int] = None,
) -> tuple[list[Application], BulkScoringReport]:
    """
    Score many resumes against one job.

    Returns:
        Tuple of (ranked applications, partial-success report)
    """
    applications = [
        Application(
            id=str(index),
            candidate_name=path.stem,
            resume=resume_document(path),
            submitted_at=datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc),
        )
        for index, path in enumerate(resumes, start=1)
    ]

    bulk = BulkScorer(build_scorer(), batch_size=batch_size)
    report = await bulk.score_report(job, applications)
    ranked = rank_applications(apply_results(applications, report.results))
    return ranked, report


@click.command()
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument(
    "resumes",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--batch-size",
    "-b",
    type=int,
    default=None,
    help="Resumes scored concurrently per batch (bulk mode)",
)
def main(job_file: Path, resumes: tuple[Path, ...], batch_size: Optional[int]):
    """ATS Scorer - Scores resumes against a structured job description."""
    setup_logging()
    job = load_job(job_file)

    if len(resumes) == 1:
        try:
            record = asyncio.run(score_single(job, resumes[0]))
        except HiringCoreError as e:
            logger.error(f"ATS scoring failed: {e}")
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        click.echo(json.dumps(record.model_dump(by_alias=True, mode="json"), indent=2))
        return

    ranked, report = asyncio.run(score_bulk(job, list(resumes), batch_size=batch_size))
    errors = {result.application_id: result.error for result in report.results if not result.success}

    for position, application in enumerate(ranked, start=1):
        if application.ats_score is not None:
            click.echo(
                f"{position:>3}. {application.candidate_name}: {application.ats_score.score}% "
                f"- {application.ats_score.recommendations}"
            )
        else:
            click.echo(
                f"{position:>3}. {application.candidate_name}: not scored "
                f"({errors.get(application.id, 'unknown error')})"
            )
    click.echo(str(report))

    if report.failed == report.total:
        sys.exit(1)


if __name__ == "__main__":
    main()
