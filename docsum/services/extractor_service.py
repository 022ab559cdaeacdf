# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------
import asyncio
import io
import logging
from typing import Protocol

import docx
import pymupdf

from ..errors import (
    ConfigurationError,
    DocxParseError,
    EmptyExtractionError,
    OcrError,
    PdfParseError,
    TextReadError,
    UnsupportedTypeError,
)
from ..models.pipeline import Artifact, ArtifactKind

logger = logging.getLogger(__name__)


class ImageTextReader(Protocol):
    def is_configured(self) -> bool: ...

    async def extract_text_from_image(self, data: bytes, media_type: str = "") -> str: ...


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

MEDIA_TYPE_KINDS = {
    PDF_MEDIA_TYPE: ArtifactKind.PDF,
    DOCX_MEDIA_TYPE: ArtifactKind.DOCX,
}

MEDIA_TYPE_PREFIX_KINDS = {
    "text/": ArtifactKind.TEXT,
    "image/": ArtifactKind.IMAGE,
}

EXTENSION_KINDS = {
    "pdf": ArtifactKind.PDF,
    "docx": ArtifactKind.DOCX,
    "txt": ArtifactKind.TEXT,
    "png": ArtifactKind.IMAGE,
    "jpg": ArtifactKind.IMAGE,
    "jpeg": ArtifactKind.IMAGE,
    "gif": ArtifactKind.IMAGE,
    "bmp": ArtifactKind.IMAGE,
    "webp": ArtifactKind.IMAGE,
}


def file_extension(file_name: str) -> str:
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def classify(media_type: str, file_name: str) -> ArtifactKind:
    """Map a declared media type, falling back to the file extension, onto an ArtifactKind.

    A recognized media type always wins; the extension is only consulted when the
    declared type is missing or matches nothing.
    """
    mime = (media_type or "").strip().lower()

    if mime in MEDIA_TYPE_KINDS:
        return MEDIA_TYPE_KINDS[mime]
    for prefix, kind in MEDIA_TYPE_PREFIX_KINDS.items():
        if mime.startswith(prefix):
            return kind

    kind = EXTENSION_KINDS.get(file_extension(file_name or ""))
    if kind is None:
        raise UnsupportedTypeError(media_type, file_name)
    return kind


# ---------------------------------------------------------------------------
# Format readers (synchronous, always call via asyncio.to_thread)
# ---------------------------------------------------------------------------

def _read_pdf(data: bytes) -> str:
    pages = []
    with pymupdf.open(stream=data, filetype="pdf") as doc:
        for page in doc:
            words = page.get_text("words")
            pages.append(" ".join(word[4] for word in words))
    return "\n".join(pages).strip()


def _read_docx(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    parts = [para.text for para in document.paragraphs]

    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append("\t".join(cells))

    return "\n".join(parts)


def _read_text(data: bytes) -> str:
    return data.decode("utf-8-sig")


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------

class TextExtractor:
    def __init__(self, ocr: ImageTextReader):
        self._ocr = ocr

    async def extract(self, artifact: Artifact) -> str:
        kind = classify(artifact.media_type, artifact.name)
        text = await self._extract_kind(kind, artifact)

        text = text.strip()
        if not text:
            raise EmptyExtractionError(artifact.name)
        return text

    async def _extract_kind(self, kind: ArtifactKind, artifact: Artifact) -> str:
        if kind is ArtifactKind.PDF:
            try:
                return await asyncio.to_thread(_read_pdf, artifact.data)
            except Exception as exc:
                raise PdfParseError(
                    f"Failed to extract text from PDF: {exc}", file_name=artifact.name, cause=exc
                ) from exc

        if kind is ArtifactKind.DOCX:
            try:
                return await asyncio.to_thread(_read_docx, artifact.data)
            except Exception as exc:
                raise DocxParseError(
                    f"Failed to extract text from DOCX: {exc}", file_name=artifact.name, cause=exc
                ) from exc

        if kind is ArtifactKind.TEXT:
            try:
                return _read_text(artifact.data)
            except UnicodeDecodeError as exc:
                raise TextReadError(
                    f"Failed to read text file: {exc}", file_name=artifact.name, cause=exc
                ) from exc

        return await self._extract_image(artifact)

    async def _extract_image(self, artifact: Artifact) -> str:
        if not self._ocr.is_configured():
            raise ConfigurationError("OpenAI API key not configured for image processing")

        try:
            return await self._ocr.extract_text_from_image(artifact.data, artifact.media_type)
        except ConfigurationError:
            raise
        except OcrError as exc:
            exc.file_name = exc.file_name or artifact.name
            raise
        except Exception as exc:
            logger.warning("Image text extraction failed for %s: %s", artifact.name, exc)
            raise OcrError(
                f"Failed to extract text from image: {exc}", file_name=artifact.name, cause=exc
            ) from exc
