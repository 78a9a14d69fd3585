"""
Plain-text extraction from uploaded JD and resume files.

Dispatches on the declared media type to a format-specific decoder:
PDF via pypdf, DOCX via python-docx, legacy DOC via the antiword binary,
and plain text. Decoder failures surface uniformly as ExtractionError.
"""

import asyncio
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union

import docx
from loguru import logger
from pypdf import PdfReader

from shared.cache import ExpiringCache
from shared.config import Settings, get_settings
from shared.errors import ExtractionError, UnsupportedFormatError
from shared.models import ExtractedText, RawDocument

PDF = "application/pdf"
DOC = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT = "text/plain"
OCTET_STREAM = "application/octet-stream"

SUFFIX_MEDIA_TYPES = {
    ".pdf": PDF,
    ".doc": DOC,
    ".docx": DOCX,
    ".txt": TEXT,
}

Source = Union[str, Path, BinaryIO]


def normalize_media_type(media_type: str) -> str:
    """Lower-case and drop parameters: 'Text/Plain; charset=utf-8' -> 'text/plain'."""
    return (media_type or "").split(";", 1)[0].strip().lower()


def media_type_for_path(path: Union[str, Path]) -> str:
    """Guess the media type from a file suffix; unknown suffixes are octet-stream."""
    return SUFFIX_MEDIA_TYPES.get(Path(path).suffix.lower(), OCTET_STREAM)


def _read_bytes(source: Source) -> bytes:
    if isinstance(source, (str, Path)):
        return Path(source).read_bytes()
    return source.read()


def _extract_pdf(source: Source) -> str:
    reader = PdfReader(source)
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(pages)


def _extract_docx(source: Source) -> str:
    document = docx.Document(str(source) if isinstance(source, Path) else source)
    lines = [para.text for para in document.paragraphs if para.text.strip()]
    for table in document.tables:
        for row in table.rows:
            for cell in row.cells:
                if cell.text.strip():
                    lines.append(cell.text)
    return "\n".join(lines)


def _extract_doc(source: Source) -> str:
    antiword = shutil.which("antiword")
    if antiword is None:
        raise RuntimeError("antiword is not installed; cannot read legacy .doc files")

    if isinstance(source, (str, Path)):
        return _run_antiword(antiword, Path(source))

    with tempfile.NamedTemporaryFile(suffix=".doc") as tmp:
        tmp.write(source.read())
        tmp.flush()
        return _run_antiword(antiword, Path(tmp.name))


def _run_antiword(antiword: str, path: Path) -> str:
    result = subprocess.run(
        [antiword, str(path)],
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise RuntimeError(result.stderr.strip() or f"antiword exited with {result.returncode}")
    return result.stdout


def _extract_txt(source: Source) -> str:
    return _read_bytes(source).decode("utf-8-sig", errors="replace")


DECODERS: dict[str, Callable[[Source], str]] = {
    PDF: _extract_pdf,
    DOC: _extract_doc,
    DOCX: _extract_docx,
    TEXT: _extract_txt,
}


class DocumentTextExtractor:
    """Decodes documents of the supported media types into plain text."""

    def __init__(self, decoders: Optional[dict[str, Callable[[Source], str]]] = None):
        self.decoders = dict(decoders or DECODERS)

    @property
    def supported_media_types(self) -> frozenset[str]:
        return frozenset(self.decoders)

    def extract_sync(self, source: Source, media_type: str) -> str:
        """
        Blocking extraction.

        Raises:
            UnsupportedFormatError: media type is not in the supported set
            ExtractionError: the decoder could not read the document
        """
        normalized = normalize_media_type(media_type)
        decoder = self.decoders.get(normalized)
        if decoder is None:
            raise UnsupportedFormatError(media_type)

        try:
            text = decoder(source)
        except Exception as e:
            logger.error(f"Failed to extract text ({normalized}): {e}")
            raise ExtractionError(f"Failed to extract text from {normalized} document: {e}") from e

        logger.debug(f"Extracted {len(text)} characters ({normalized})")
        return text

    async def extract(self, source: Source, media_type: str) -> str:
        """Extract text without blocking the event loop."""
        normalized = normalize_media_type(media_type)
        if normalized not in self.decoders:
            raise UnsupportedFormatError(media_type)
        return await asyncio.to_thread(self.extract_sync, source, media_type)


class CachedTextExtractor:
    """DocumentTextExtractor fronted by a time-bounded cache per document."""

    def __init__(
        self,
        extractor: Optional[DocumentTextExtractor] = None,
        cache: Optional[ExpiringCache[ExtractedText]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.extractor = extractor or DocumentTextExtractor()
        if cache is None:
            cache = ExpiringCache(self.settings.extraction_cache_ttl_seconds)
        self.cache = cache

    @staticmethod
    def cache_key(document: RawDocument) -> tuple[str, str]:
        return document.identifier, normalize_media_type(document.media_type)

    async def extract_record(self, document: RawDocument) -> ExtractedText:
        """Extracted text for ``document``, decoded at most once per TTL window."""
        source_id, media_type = self.cache_key(document)

        async def compute() -> ExtractedText:
            logger.info(f"Extracting text from {source_id} ({media_type})")
            text = await self.extractor.extract(document.path, document.media_type)
            return ExtractedText(source_id=source_id, media_type=media_type, text=text)

        return await self.cache.get_or_compute((source_id, media_type), compute)

    async def extract_document(self, document: RawDocument) -> str:
        return (await self.extract_record(document)).text
