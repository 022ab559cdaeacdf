from typing import Optional

from pydantic import BaseModel, Field

from .pipeline import SentimentLabel, WordCount


class SaveSummaryRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    summary: str
    keywords: list[str] = Field(default_factory=list)
    sentiment: Optional[SentimentLabel] = None
    word_count: WordCount = Field(default_factory=WordCount)
    translation: Optional[str] = None
    target_language: Optional[str] = None
    original_text: Optional[str] = None
    file_names: list[str] = Field(default_factory=list)
    file_type: Optional[str] = None
    title: Optional[str] = None


class SaveSummaryResponse(BaseModel):
    id: str


class UpdateSummaryRequest(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    keywords: Optional[list[str]] = None


class SavedSummary(BaseModel):
    id: str
    user_id: str
    summary: str
    keywords: list[str] = Field(default_factory=list)
    sentiment: Optional[SentimentLabel] = None
    word_count: WordCount = Field(default_factory=WordCount)
    translation: Optional[str] = None
    target_language: Optional[str] = None
    original_text: Optional[str] = None
    file_names: list[str] = Field(default_factory=list)
    file_type: Optional[str] = None
    title: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

