# Shared module for common utilities, models, and configuration
from .config import Settings, get_settings
from .errors import (
    AIUnavailableError,
    ExtractionError,
    HiringCoreError,
    MalformedAIResponseError,
    UnsupportedFormatError,
)
from .models import (
    Application,
    ATSScoreRecord,
    BulkScoringResult,
    ExtractedText,
    JobDraft,
    JobPosting,
    RawDocument,
    StructuredJobDescription,
)

__all__ = [
    "Settings",
    "get_settings",
    "HiringCoreError",
    "UnsupportedFormatError",
    "ExtractionError",
    "AIUnavailableError",
    "MalformedAIResponseError",
    "Application",
    "ATSScoreRecord",
    "BulkScoringResult",
    "ExtractedText",
    "JobDraft",
    "JobPosting",
    "RawDocument",
    "StructuredJobDescription",
]
