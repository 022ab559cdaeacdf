"""
Shared fixtures: in-memory stand-ins for the OpenAI-backed services and
small real PDF / DOCX documents built on the fly.
"""

import asyncio
import io

import docx
import pymupdf
import pytest

from docsum.errors import GenerationError
from docsum.models.pipeline import SummaryOptions, SummaryResult, WordCount
from docsum.services.document_processor import DocumentProcessor
from docsum.services.extractor_service import TextExtractor


class FakeGenerator:
    """Summarizes by echoing; records every call."""

    def __init__(self, keywords=None, fail_on=(), delays=None):
        self.calls: list[tuple[str, SummaryOptions]] = []
        self.keywords = keywords or {}
        self.fail_on = tuple(fail_on)
        self.delays = delays or {}

    async def generate_summary(self, text: str, options: SummaryOptions) -> SummaryResult:
        self.calls.append((text, options))
        for marker, delay in self.delays.items():
            if marker in text:
                await asyncio.sleep(delay)
        for marker in self.fail_on:
            if marker in text:
                raise GenerationError(f"Failed to generate summary for '{marker}'")

        summary = f"Summary of: {text[:40]}"
        keywords = None
        if options.include_keywords:
            keywords = next((kw for marker, kw in self.keywords.items() if marker in text), [])
        return SummaryResult(
            summary=summary,
            keywords=keywords,
            sentiment="neutral" if options.include_sentiment else None,
            word_count=WordCount(original=len(text.split()), summary=len(summary.split())),
            target_language=options.target_language,
        )


class FakeOcr:
    def __init__(self, configured=True, text="Scanned receipt total 42", error=None):
        self.configured = configured
        self.text = text
        self.error = error
        self.calls = 0

    def is_configured(self) -> bool:
        return self.configured

    async def extract_text_from_image(self, data: bytes, media_type: str = "") -> str:
        self.calls += 1
        if self.error:
            raise self.error
        return self.text


def make_pdf(*pages: str) -> bytes:
    doc = pymupdf.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_docx(*paragraphs: str) -> bytes:
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def ocr():
    return FakeOcr()


@pytest.fixture
def extractor(ocr):
    return TextExtractor(ocr=ocr)


@pytest.fixture
def processor(extractor, generator):
    return DocumentProcessor(extractor, generator, max_concurrency=4)


@pytest.fixture
def pdf_bytes():
    return make_pdf("Alpha Beta")


@pytest.fixture
def docx_bytes():
    return make_docx("Party A agrees to provide services.", "Payment terms: Net 30 days.")
