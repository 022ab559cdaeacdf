from typing import Optional


class SummarizerError(Exception):
    pass


class ConfigurationError(SummarizerError):
    pass


class ExtractionError(SummarizerError):
    def __init__(self, message: str, file_name: str = "", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.file_name = file_name
        self.cause = cause


class UnsupportedTypeError(ExtractionError):
    def __init__(self, media_type: str, file_name: str = ""):
        super().__init__(
            f"Unsupported file type: {media_type or 'unknown'} ({file_name})",
            file_name=file_name,
        )
        self.media_type = media_type


class EmptyExtractionError(ExtractionError):
    def __init__(self, file_name: str = ""):
        super().__init__("No text could be extracted from the file", file_name=file_name)


class PdfParseError(ExtractionError):
    pass


class DocxParseError(ExtractionError):
    pass


class TextReadError(ExtractionError):
    pass


class OcrError(ExtractionError):
    pass


class TranscriptionError(SummarizerError):
    pass


class GenerationError(SummarizerError):
    pass


class AllFilesFailedError(SummarizerError):
    """Raised when no artifact in a batch produced a summary."""

    def __init__(self, failures: list):
        self.failures = list(failures)
        super().__init__(
            f"No documents were successfully processed ({len(self.failures)} failed)"
        )

    @property
    def messages(self) -> list[str]:
        return [f"{failure.file_name}: {failure.error}" for failure in self.failures]


class SummaryNotFoundError(SummarizerError):
    def __init__(self, summary_id: str):
        super().__init__(f"Summary '{summary_id}' not found.")
        self.summary_id = summary_id
