from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag

from .pipeline import CombinedResult, FileOutcome, LengthClass, SummaryResult


class SummarizeTextRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Pasted text to summarize.")
    length: LengthClass = Field(
        default="medium",
        description="'short' is 2-3 sentences, 'medium' 1-2 paragraphs, 'long' 3-4 detailed paragraphs.",
    )
    target_language: Optional[str] = Field(
        default=None,
        description="Language code to translate the summary into, e.g. 'es'. Empty means no translation.",
    )


def _result_kind(value: Any) -> str:
    if isinstance(value, dict):
        return "combined" if "document_count" in value else "single"
    return "combined" if isinstance(value, CombinedResult) else "single"


BatchResult = Annotated[
    Union[
        Annotated[SummaryResult, Tag("single")],
        Annotated[CombinedResult, Tag("combined")],
    ],
    Discriminator(_result_kind),
]


class BatchSummaryResponse(BaseModel):
    result: BatchResult = Field(
        description="Combined summary of every file that succeeded, or the lone success as-is."
    )
    outcomes: list[FileOutcome] = Field(description="Per-file outcome in upload order.")
    failed_count: int = Field(ge=0)


class TranscriptionResponse(BaseModel):
    text: str
    word_count: int
