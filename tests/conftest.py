"""Shared fixtures: settings, stub completion service and sample documents."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

import docx
import pytest

from shared.config import Settings
from shared.models import Application, ATSScoreRecord, RawDocument


@pytest.fixture(autouse=True)
def _isolate_runtime_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear local env that can leak into tests on developer machines."""
    for key in ("OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_BASE_URL", "SCORING_BATCH_SIZE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, openai_api_key="test-key", log_format="text")


class StubCompletion:
    """CompletionService double that records prompts and returns canned replies."""

    def __init__(
        self,
        reply: str = "",
        configured: bool = True,
        reply_fn: Optional[Callable[[str], str]] = None,
    ):
        self.reply = reply
        self.configured = configured
        self.reply_fn = reply_fn
        self.prompts: list[str] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.reply_fn is not None:
            return self.reply_fn(prompt)
        return self.reply


@pytest.fixture
def stub_completion() -> type[StubCompletion]:
    return StubCompletion


def make_pdf(text: str) -> bytes:
    """Smallest valid single-page PDF showing ``text`` in Helvetica."""
    stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_at,
    )
    return bytes(out)


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "resume.pdf"
    path.write_bytes(make_pdf("Senior Python Engineer"))
    return path


@pytest.fixture
def docx_file(tmp_path: Path) -> Path:
    document = docx.Document()
    document.add_paragraph("Data Analyst")
    document.add_paragraph("Skills: SQL, Tableau")
    table = document.add_table(rows=1, cols=1)
    table.cell(0, 0).text = "Certified Scrum Master"
    path = tmp_path / "resume.docx"
    document.save(str(path))
    return path


@pytest.fixture
def txt_file(tmp_path: Path) -> Path:
    path = tmp_path / "jd.txt"
    path.write_text(
        "Title: Backend Engineer\nLocation: Remote\nRequired Skills: Python, SQL\n",
        encoding="utf-8",
    )
    return path


def make_document(path: Path, media_type: str = "text/plain", identifier: Optional[str] = None) -> RawDocument:
    return RawDocument(identifier=identifier or path.name, media_type=media_type, path=path)


def make_application(
    app_id: str,
    score: Optional[int] = None,
    submitted_at: Optional[datetime] = None,
    tmp_path: Path = Path("/tmp"),
) -> Application:
    return Application(
        id=app_id,
        candidate_name=f"Candidate {app_id}",
        resume=make_document(tmp_path / f"{app_id}.txt", identifier=f"resume-{app_id}"),
        submitted_at=submitted_at or datetime(2025, 1, 1, tzinfo=timezone.utc),
        ats_score=ATSScoreRecord(score=score) if score is not None else None,
    )


def structured_reply(**fields) -> str:
    """LLM-style reply wrapping a JSON object in prose and a code fence."""
    return "Here is the result:\n```json\n" + json.dumps(fields) + "\n```\nLet me know!"
