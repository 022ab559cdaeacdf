from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


LengthClass = Literal["short", "medium", "long"]
SentimentLabel = Literal["positive", "negative", "neutral"]


class ArtifactKind(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class Artifact:
    """One submitted input unit: a name, a declared media type and its raw bytes."""

    name: str
    media_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_text(cls, text: str, name: str = "pasted-text.txt") -> "Artifact":
        return cls(name=name, media_type="text/plain", data=text.encode("utf-8"))


class SummaryOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    length: LengthClass = "medium"
    target_language: Optional[str] = None
    include_keywords: bool = True
    include_sentiment: bool = True

    @field_validator("target_language")
    @classmethod
    def _blank_means_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip().lower()


class WordCount(BaseModel):
    original: int = Field(default=0, ge=0)
    summary: int = Field(default=0, ge=0)


class SummaryResult(BaseModel):
    summary: str
    keywords: Optional[list[str]] = None
    sentiment: Optional[SentimentLabel] = None
    word_count: WordCount = Field(default_factory=WordCount)
    translation: Optional[str] = None
    language: str = "en"
    target_language: Optional[str] = None
    processing_time: Optional[float] = Field(default=None, description="Seconds spent on this result.")
    # Set by the document processor, not by the generator.
    original_text: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None


class CombinedResult(SummaryResult):
    file_names: list[str] = Field(default_factory=list)
    document_count: int = Field(default=0, ge=0)


class FileSuccess(BaseModel):
    status: Literal["success"] = "success"
    file_name: str
    data: SummaryResult


class FileFailure(BaseModel):
    status: Literal["failure"] = "failure"
    file_name: str
    error: str


FileOutcome = Annotated[Union[FileSuccess, FileFailure], Field(discriminator="status")]
