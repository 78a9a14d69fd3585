"""
Structurer Service - LLM-based job description structuring.

Converts an uploaded JD document into the canonical structured schema,
renders the plain-text description and validates completeness.
"""

from .jd_structurer import (
    JobStructurer,
    format_description,
    merge_overrides,
    missing_required_fields,
)

__all__ = [
    "JobStructurer",
    "format_description",
    "merge_overrides",
    "missing_required_fields",
]
