from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..models.pipeline import Artifact, FileFailure, LengthClass, SummaryOptions, SummaryResult
from ..models.summarizer import BatchSummaryResponse, SummarizeTextRequest
from ..services.document_processor import DocumentProcessor
from ..services.openai_service import OpenAIService
from .dependencies import get_openai_service, get_processor, http_error, read_artifact, read_upload

router = APIRouter(prefix="/summarize", tags=["Summarizer"])


# ─────────────────────────────────────────────
# POST /summarize/text
# Pasted text → summary
# ─────────────────────────────────────────────

@router.post(
    "/text",
    response_model=SummaryResult,
    summary="Summarize pasted text",
)
async def summarize_text(
    request: SummarizeTextRequest,
    processor: DocumentProcessor = Depends(get_processor),
) -> SummaryResult:
    options = SummaryOptions(length=request.length, target_language=request.target_language)
    try:
        return await processor.process_single(Artifact.from_text(request.text), options)
    except Exception as exc:
        raise http_error(exc) from exc


# ─────────────────────────────────────────────
# POST /summarize/file
# One uploaded document or image → summary
# ─────────────────────────────────────────────

@router.post(
    "/file",
    response_model=SummaryResult,
    summary="Summarize one uploaded file",
    description="Accepts PDF, DOCX, plain text and common image formats (text is read from images by OCR).",
)
async def summarize_file(
    file: UploadFile = File(...),
    length: LengthClass = Form("medium"),
    target_language: Optional[str] = Form(None),
    processor: DocumentProcessor = Depends(get_processor),
) -> SummaryResult:
    artifact = await read_artifact(file)
    options = SummaryOptions(length=length, target_language=target_language)
    try:
        return await processor.process_single(artifact, options)
    except Exception as exc:
        raise http_error(exc) from exc


# ─────────────────────────────────────────────
# POST /summarize/batch
# Many files → per-file outcomes + one combined summary
# ─────────────────────────────────────────────

@router.post(
    "/batch",
    response_model=BatchSummaryResponse,
    summary="Summarize several files into one combined summary",
    description=(
        "Each file is summarized on its own; files that fail are reported in 'outcomes' "
        "without stopping the others. The successful summaries are then merged into one."
    ),
)
async def summarize_batch(
    files: list[UploadFile] = File(...),
    length: LengthClass = Form("medium"),
    target_language: Optional[str] = Form(None),
    processor: DocumentProcessor = Depends(get_processor),
) -> BatchSummaryResponse:
    # Oversize uploads become failures in place; the rest are still summarized.
    artifacts = [await read_upload(f) for f in files]
    options = SummaryOptions(length=length, target_language=target_language)
    try:
        batch = await processor.process_batch(artifacts, options)
    except Exception as exc:
        raise http_error(exc) from exc

    return BatchSummaryResponse(
        result=batch.result,
        outcomes=batch.outcomes,
        failed_count=sum(1 for o in batch.outcomes if isinstance(o, FileFailure)),
    )


# ─────────────────────────────────────────────
# POST /summarize/speech
# Recorded audio → transcript → summary
# ─────────────────────────────────────────────

@router.post(
    "/speech",
    response_model=SummaryResult,
    summary="Transcribe a recording and summarize the transcript",
)
async def summarize_speech(
    audio: UploadFile = File(...),
    length: LengthClass = Form("medium"),
    target_language: Optional[str] = Form(None),
    processor: DocumentProcessor = Depends(get_processor),
    openai_service: OpenAIService = Depends(get_openai_service),
) -> SummaryResult:
    recording = await read_artifact(audio)
    options = SummaryOptions(length=length, target_language=target_language)
    try:
        transcript = await openai_service.speech_to_text(recording.data, recording.name or "audio.wav")
        return await processor.process_single(Artifact.from_text(transcript, name="transcript.txt"), options)
    except Exception as exc:
        raise http_error(exc) from exc
