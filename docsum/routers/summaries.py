from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..config import settings
from ..errors import SummaryNotFoundError
from ..models.summaries import SavedSummary, SaveSummaryRequest, SaveSummaryResponse, UpdateSummaryRequest
from ..services.firebase_service import FirebaseService
from .dependencies import get_firebase_service, http_error

router = APIRouter(prefix="/summaries", tags=["Summaries"])


@router.post("", response_model=SaveSummaryResponse, status_code=status.HTTP_201_CREATED)
async def save_summary(
    request: SaveSummaryRequest,
    firebase: FirebaseService = Depends(get_firebase_service),
) -> SaveSummaryResponse:
    data = request.model_dump(exclude={"user_id"})
    summary_id = await firebase.save_summary(request.user_id, data)
    return SaveSummaryResponse(id=summary_id)


@router.get("", response_model=list[SavedSummary])
async def list_summaries(
    user_id: str = Query(..., min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=200),
    file_type: Optional[str] = Query(None, description="Only return summaries saved with this file type."),
    firebase: FirebaseService = Depends(get_firebase_service),
) -> list[SavedSummary]:
    docs = await firebase.get_user_summaries(user_id, limit or settings.summaries_page_size)
    if file_type:
        docs = [doc for doc in docs if doc.get("file_type") == file_type]
    return [SavedSummary.model_validate(doc) for doc in docs]


@router.patch("/{summary_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_summary(
    summary_id: str,
    request: UpdateSummaryRequest,
    firebase: FirebaseService = Depends(get_firebase_service),
) -> Response:
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail="Nothing to update.")
    try:
        await firebase.update_summary(summary_id, updates)
    except SummaryNotFoundError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{summary_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_summary(
    summary_id: str,
    firebase: FirebaseService = Depends(get_firebase_service),
) -> Response:
    try:
        await firebase.delete_summary(summary_id)
    except SummaryNotFoundError as exc:
        raise http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
