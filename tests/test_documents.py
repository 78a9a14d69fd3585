"""Tests for document text extraction and the cached extractor."""

import io
import subprocess

import pytest

from conftest import make_document
from extractor.documents import (
    DOC,
    DOCX,
    PDF,
    TEXT,
    CachedTextExtractor,
    DocumentTextExtractor,
    media_type_for_path,
    normalize_media_type,
)
from shared.cache import ExpiringCache
from shared.errors import ExtractionError, UnsupportedFormatError
from shared.models import ExtractedText


@pytest.fixture
def extractor():
    return DocumentTextExtractor()


class TestSupportedFormats:
    @pytest.mark.asyncio
    async def test_plain_text(self, extractor, txt_file):
        text = await extractor.extract(txt_file, TEXT)
        assert "Location: Remote" in text

    @pytest.mark.asyncio
    async def test_plain_text_with_charset_parameter(self, extractor, txt_file):
        text = await extractor.extract(txt_file, "Text/Plain; charset=utf-8")
        assert "Backend Engineer" in text

    @pytest.mark.asyncio
    async def test_plain_text_from_handle(self, extractor):
        handle = io.BytesIO("\ufeffJunior QA Tester".encode("utf-8"))
        assert await extractor.extract(handle, TEXT) == "Junior QA Tester"

    @pytest.mark.asyncio
    async def test_pdf(self, extractor, pdf_file):
        text = await extractor.extract(pdf_file, PDF)
        assert "Python" in text

    @pytest.mark.asyncio
    async def test_docx_paragraphs_and_tables(self, extractor, docx_file):
        text = await extractor.extract(docx_file, DOCX)
        assert "Data Analyst" in text
        assert "SQL, Tableau" in text
        assert "Certified Scrum Master" in text

    @pytest.mark.asyncio
    async def test_legacy_doc_uses_antiword(self, extractor, tmp_path, monkeypatch):
        path = tmp_path / "resume.doc"
        path.write_bytes(b"\xd0\xcf\x11\xe0 legacy word binary")
        calls = []

        def fake_run(args, **kwargs):
            calls.append(args)
            return subprocess.CompletedProcess(args, 0, stdout="Legacy resume text\n", stderr="")

        monkeypatch.setattr("extractor.documents.shutil.which", lambda name: "/usr/bin/antiword")
        monkeypatch.setattr("extractor.documents.subprocess.run", fake_run)

        text = await extractor.extract(path, DOC)

        assert text.strip() == "Legacy resume text"
        assert calls == [["/usr/bin/antiword", str(path)]]


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("media_type", ["image/png", "application/zip", "", "text/html"])
    async def test_unsupported_media_type(self, extractor, txt_file, media_type):
        with pytest.raises(UnsupportedFormatError) as exc:
            await extractor.extract(txt_file, media_type)
        assert exc.value.media_type == media_type

    @pytest.mark.asyncio
    async def test_unsupported_type_never_calls_a_decoder(self, txt_file):
        calls = []
        extractor = DocumentTextExtractor({TEXT: lambda source: calls.append(source) or ""})

        with pytest.raises(UnsupportedFormatError):
            await extractor.extract(txt_file, PDF)
        assert calls == []

    @pytest.mark.asyncio
    async def test_corrupt_pdf_is_extraction_error(self, extractor, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf at all")

        with pytest.raises(ExtractionError):
            await extractor.extract(path, PDF)

    @pytest.mark.asyncio
    async def test_corrupt_docx_is_extraction_error(self, extractor, tmp_path):
        path = tmp_path / "broken.docx"
        path.write_bytes(b"PK\x03\x04 truncated zip")

        with pytest.raises(ExtractionError):
            await extractor.extract(path, DOCX)

    @pytest.mark.asyncio
    async def test_missing_antiword_is_extraction_error(self, extractor, tmp_path, monkeypatch):
        path = tmp_path / "resume.doc"
        path.write_bytes(b"\xd0\xcf\x11\xe0")
        monkeypatch.setattr("extractor.documents.shutil.which", lambda name: None)

        with pytest.raises(ExtractionError, match="antiword"):
            await extractor.extract(path, DOC)

    @pytest.mark.asyncio
    async def test_missing_file_is_extraction_error(self, extractor, tmp_path):
        with pytest.raises(ExtractionError):
            await extractor.extract(tmp_path / "gone.txt", TEXT)


class TestMediaTypes:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("jd.PDF", PDF),
            ("cv.doc", DOC),
            ("cv.docx", DOCX),
            ("notes.txt", TEXT),
            ("photo.png", "application/octet-stream"),
        ],
    )
    def test_media_type_for_path(self, name, expected):
        assert media_type_for_path(name) == expected

    def test_normalize_media_type(self):
        assert normalize_media_type(" Application/PDF ; q=1") == PDF


class TestCachedTextExtractor:
    @pytest.mark.asyncio
    async def test_same_document_extracted_once(self, settings, txt_file):
        calls = []

        def decode(source):
            calls.append(source)
            return "resume text"

        cached = CachedTextExtractor(DocumentTextExtractor({TEXT: decode}), settings=settings)
        document = make_document(txt_file)

        assert await cached.extract_document(document) == "resume text"
        assert await cached.extract_document(document) == "resume text"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_caches_extracted_text_record(self, settings, txt_file):
        cached = CachedTextExtractor(
            DocumentTextExtractor({TEXT: lambda source: "resume text"}), settings=settings
        )
        document = make_document(txt_file, "Text/Plain; charset=utf-8", identifier="cv-7")

        record = await cached.extract_record(document)

        assert record == ExtractedText(source_id="cv-7", media_type=TEXT, text="resume text")
        assert record.model_dump(by_alias=True)["sourceId"] == "cv-7"
        assert await cached.extract_record(document) is record
        assert ("cv-7", TEXT) in cached.cache

    @pytest.mark.asyncio
    async def test_reextracts_after_ttl(self, settings, txt_file):
        now = [0.0]
        calls = []

        def decode(source):
            calls.append(source)
            return f"resume text {len(calls)}"

        cached = CachedTextExtractor(
            DocumentTextExtractor({TEXT: decode}),
            cache=ExpiringCache(ttl_seconds=3600, clock=lambda: now[0]),
            settings=settings,
        )
        document = make_document(txt_file)

        await cached.extract_document(document)
        now[0] += 3601
        assert await cached.extract_document(document) == "resume text 2"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_key_includes_media_type(self, settings, txt_file):
        cached = CachedTextExtractor(settings=settings)
        assert cached.cache_key(make_document(txt_file, "TEXT/PLAIN")) == (txt_file.name, TEXT)

    @pytest.mark.asyncio
    async def test_unsupported_document_propagates(self, settings, txt_file):
        cached = CachedTextExtractor(settings=settings)
        with pytest.raises(UnsupportedFormatError):
            await cached.extract_document(make_document(txt_file, "image/png"))
