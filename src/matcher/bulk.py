"""
Bulk ATS scoring of every application for one job.

Applications are scored in fixed-size batches: all candidates in a batch
run concurrently, and the next batch starts only once the whole batch has
finished. One candidate's failure never aborts the run.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from loguru import logger

from shared.config import Settings, get_settings
from shared.models import Application, ATSScoreRecord, BulkScoringResult, JobPosting, RawDocument


class ResumeScorer(Protocol):
    async def score_resume(self, document: RawDocument, job: JobPosting) -> ATSScoreRecord: ...


@dataclass
class BulkScoringReport:
    """Partial-success summary of a bulk run."""

    results: list[BulkScoringResult]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def __str__(self) -> str:
        return f"Scored: {self.succeeded}/{self.total}, Failed: {self.failed}"


def batched(items: Sequence[Application], size: int) -> list[Sequence[Application]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class BulkScorer:
    """Runs an ATS scorer over many applications with bounded concurrency."""

    def __init__(
        self,
        scorer: ResumeScorer,
        settings: Optional[Settings] = None,
        batch_size: Optional[int] = None,
    ):
        self.settings = settings or get_settings()
        self.scorer = scorer
        if batch_size is None:
            batch_size = self.settings.scoring_batch_size
        self.batch_size = batch_size
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")

    async def _score_one(self, job: JobPosting, application: Application) -> BulkScoringResult:
        try:
            record = await self.scorer.score_resume(application.resume, job)
        except Exception as e:
            logger.error(
                f"Error calculating ATS for {application.candidate_name or application.id}: {e}"
            )
            return BulkScoringResult(application_id=application.id, error=str(e), success=False)

        return BulkScoringResult(application_id=application.id, ats_score=record)

    async def score_all(
        self,
        job: JobPosting,
        applications: Sequence[Application],
    ) -> list[BulkScoringResult]:
        """
        Score every application against ``job``.

        Returns:
            One result per application, in input order
        """
        batches = batched(applications, self.batch_size)
        logger.info(
            f"Starting ATS calculation for {len(applications)} applications "
            f"in {len(batches)} batches of up to {self.batch_size}"
        )

        results: list[BulkScoringResult] = []
        for number, batch in enumerate(batches, start=1):
            logger.info(f"Processing batch {number}/{len(batches)}")
            batch_results = await asyncio.gather(
                *(self._score_one(job, application) for application in batch)
            )
            results.extend(batch_results)
            logger.info(f"Batch {number} completed")

        logger.info(f"Bulk scoring complete: {BulkScoringReport(results)}")
        return results

    async def score_report(
        self,
        job: JobPosting,
        applications: Sequence[Application],
    ) -> BulkScoringReport:
        return BulkScoringReport(await self.score_all(job, applications))


def apply_results(
    applications: Sequence[Application],
    results: Sequence[BulkScoringResult],
) -> list[Application]:
    """
    Attach new score records to their applications.

    Successful results replace the previous record wholesale; failed ones
    leave the application untouched.
    """
    scores = {result.application_id: result.ats_score for result in results if result.success}
    return [
        application.model_copy(update={"ats_score": scores[application.id]})
        if application.id in scores
        else application
        for application in applications
    ]
