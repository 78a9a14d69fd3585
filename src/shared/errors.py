"""
Error taxonomy shared by the extraction, structuring and scoring services.
"""

from typing import Optional


class HiringCoreError(Exception):
    """Base class for all document analysis errors."""


class UnsupportedFormatError(HiringCoreError):
    """Declared media type is not one we can decode."""

    def __init__(self, media_type: str, message: Optional[str] = None):
        self.media_type = media_type
        super().__init__(
            message
            or f"Unsupported file type '{media_type}'. "
            "Please upload PDF, Word (.doc, .docx), or Text (.txt) files."
        )


class ExtractionError(HiringCoreError):
    """Decoder failed on a supported media type (corrupt or unreadable file)."""


class AIUnavailableError(HiringCoreError):
    """Completion service has no usable configuration."""


class MalformedAIResponseError(HiringCoreError):
    """Completion reply did not contain a usable JSON object."""
