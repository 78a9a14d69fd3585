"""
Extractor Service - plain text from uploaded documents.

Decodes PDF, Word and text files into plain text and caches the result
per document so repeated scoring of the same resume skips the decode.
"""

from .documents import (
    CachedTextExtractor,
    DocumentTextExtractor,
    media_type_for_path,
    normalize_media_type,
)

__all__ = [
    "CachedTextExtractor",
    "DocumentTextExtractor",
    "media_type_for_path",
    "normalize_media_type",
]
