from typing import Union

from fastapi import HTTPException, Request, UploadFile, status

from ..config import settings
from ..errors import (
    AllFilesFailedError,
    ConfigurationError,
    ExtractionError,
    GenerationError,
    SummaryNotFoundError,
    TranscriptionError,
    UnsupportedTypeError,
)
from ..models.pipeline import Artifact, FileFailure
from ..services.document_processor import DocumentProcessor
from ..services.extractor_service import TextExtractor
from ..services.firebase_service import FirebaseService
from ..services.openai_service import OpenAIService


def get_openai_service(request: Request) -> OpenAIService:
    return request.app.state.openai_service


def get_extractor(request: Request) -> TextExtractor:
    return request.app.state.extractor


def get_processor(request: Request) -> DocumentProcessor:
    return request.app.state.processor


def get_firebase_service(request: Request) -> FirebaseService:
    service = getattr(request.app.state, "firebase_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Saved summaries are unavailable: Firebase is not configured.",
        )
    return service


def _too_large(file_name: str) -> FileFailure:
    return FileFailure(
        file_name=file_name,
        error=f"{file_name} is too large. Maximum size: {settings.max_file_size_mb}MB",
    )


async def read_upload(upload: UploadFile) -> Union[Artifact, FileFailure]:
    """Read an upload into an Artifact, or a FileFailure when it exceeds the size limit."""
    file_name = upload.filename or "unknown"
    max_bytes = settings.max_file_size_mb * 1024 * 1024

    # Reject on the declared size before buffering the body.
    if upload.size is not None and upload.size > max_bytes:
        return _too_large(file_name)

    data = await upload.read()
    if len(data) > max_bytes:
        return _too_large(file_name)
    return Artifact(name=upload.filename or "", media_type=upload.content_type or "", data=data)


async def read_artifact(upload: UploadFile) -> Artifact:
    item = await read_upload(upload)
    if isinstance(item, FileFailure):
        raise HTTPException(status_code=status.HTTP_413_CONTENT_TOO_LARGE, detail=item.error)
    return item


def http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, UnsupportedTypeError):
        return HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc))
    if isinstance(exc, AllFilesFailedError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail={"message": str(exc), "errors": exc.messages},
        )
    if isinstance(exc, (ExtractionError, TranscriptionError, ValueError)):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, GenerationError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    if isinstance(exc, SummaryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Summarization failed: {exc}",
    )
