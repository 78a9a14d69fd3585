"""
Display ordering for a job's applications.

Scored applications come first, highest score first. Unscored ones follow,
newest submission first. Ties fall back to newer submission, then id.
"""

from datetime import datetime
from typing import Iterable, Optional

from shared.models import Application


def _timestamp(submitted_at: Optional[datetime]) -> float:
    # Missing submission time sorts as oldest.
    return submitted_at.timestamp() if submitted_at else float("-inf")


def ranking_key(application: Application) -> tuple:
    score = application.ats_score.score if application.ats_score is not None else None
    return (
        0 if score is not None else 1,
        -score if score is not None else 0,
        -_timestamp(application.submitted_at),
        application.id,
    )


def rank_applications(applications: Iterable[Application]) -> list[Application]:
    """Return applications in display order; the input is left untouched."""
    return sorted(applications, key=ranking_key)
