from fastapi import APIRouter, Depends, File, UploadFile

from ..models.extract import ExtractResponse
from ..services.extractor_service import TextExtractor, classify
from .dependencies import get_extractor, http_error, read_artifact

router = APIRouter(prefix="/extract", tags=["Extract"])


@router.post("", response_model=ExtractResponse, summary="Extract plain text from an uploaded file")
async def extract_file(
    file: UploadFile = File(...),
    extractor: TextExtractor = Depends(get_extractor),
) -> ExtractResponse:
    artifact = await read_artifact(file)
    try:
        kind = classify(artifact.media_type, artifact.name)
        content = await extractor.extract(artifact)
    except Exception as exc:
        raise http_error(exc) from exc

    return ExtractResponse(
        file_name=artifact.name,
        file_type=artifact.media_type,
        kind=kind,
        content=content,
        word_count=len(content.split()),
    )
