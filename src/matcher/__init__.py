"""
Matcher Service - LLM-based resume-job ATS scoring.

This service uses an LLM to evaluate how well a candidate's resume
matches a job's structured requirements, providing a score from 0-100
with an explanation, for one application or all applications of a job.
"""

from .ats_scorer import ATSScorer, normalize_score_record
from .bulk import BulkScorer, BulkScoringReport, apply_results

__all__ = [
    "ATSScorer",
    "BulkScorer",
    "BulkScoringReport",
    "apply_results",
    "normalize_score_record",
]
