from fastapi import APIRouter, Depends, File, UploadFile

from ..models.summarizer import TranscriptionResponse
from ..services.openai_service import OpenAIService, count_words
from .dependencies import get_openai_service, http_error, read_artifact

router = APIRouter(tags=["Transcribe"])


@router.post("/transcribe", response_model=TranscriptionResponse, summary="Transcribe recorded speech")
async def transcribe(
    audio: UploadFile = File(...),
    openai_service: OpenAIService = Depends(get_openai_service),
) -> TranscriptionResponse:
    recording = await read_artifact(audio)
    try:
        text = await openai_service.speech_to_text(recording.data, recording.name or "audio.wav")
    except Exception as exc:
        raise http_error(exc) from exc
    return TranscriptionResponse(text=text, word_count=count_words(text))
