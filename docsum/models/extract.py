from pydantic import BaseModel

from .pipeline import ArtifactKind


class ExtractResponse(BaseModel):
    file_name: str
    file_type: str
    kind: ArtifactKind
    content: str
    word_count: int
