import base64
import io
import json
import logging
from typing import Any, Optional

from openai import APIError, APITimeoutError, AsyncOpenAI, AuthenticationError, RateLimitError

from ..config import Settings
from ..errors import ConfigurationError, GenerationError, OcrError, TranscriptionError
from ..models.pipeline import SummaryOptions, SummaryResult, WordCount

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your_openai_api_key_here"
SOURCE_LANGUAGE = "en"

LENGTH_INSTRUCTIONS = {
    "short": "in 2-3 sentences",
    "medium": "in 1-2 paragraphs",
    "long": "in 3-4 detailed paragraphs",
}

LANGUAGE_NAMES = {
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "hi": "Hindi",
}

_SENTIMENTS = {"positive", "negative", "neutral"}

_SUMMARY_SYSTEM_PROMPT = (
    "You are an expert text summarizer. Provide accurate, concise summaries while "
    "preserving the most important information. Always respond with valid JSON."
)

_OCR_PROMPT = (
    "Extract all text content from this image. Return only the extracted text, "
    "maintaining the original structure and formatting as much as possible."
)


def count_words(text: str) -> int:
    return len(text.split())


def _build_summary_prompt(text: str, options: SummaryOptions) -> str:
    fields = ['"summary": "your summary here"']
    asks = ["A clear, concise summary"]
    if options.include_keywords:
        asks.append("A list of 5-8 key topics/keywords")
        fields.append('"keywords": ["keyword1", "keyword2", "keyword3"]')
    if options.include_sentiment:
        asks.append("The overall sentiment (positive, negative, or neutral)")
        fields.append('"sentiment": "positive|negative|neutral"')

    numbered = "\n".join(f"{i}. {ask}" for i, ask in enumerate(asks, start=1))
    return (
        f"Please analyze and summarize the following text {LENGTH_INSTRUCTIONS[options.length]}. "
        "Focus on the main points, key insights, and important details.\n\n"
        f"Text to summarize:\n\"\"\"\n{text}\n\"\"\"\n\n"
        f"Please provide:\n{numbered}\n\n"
        "Format your response as a JSON object with the following keys:\n"
        "{" + ", ".join(fields) + "}"
    )


def _parse_summary_payload(raw: str, options: SummaryOptions) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GenerationError("Summary service returned malformed JSON.") from exc

    if not isinstance(payload, dict):
        raise GenerationError("Summary service returned an unexpected payload.")

    summary = payload.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise GenerationError("Summary service returned no summary text.")

    keywords = None
    if options.include_keywords:
        raw_keywords = payload.get("keywords")
        if not isinstance(raw_keywords, list):
            raw_keywords = []
        keywords = [str(k).strip() for k in raw_keywords if str(k).strip()]

    sentiment = None
    if options.include_sentiment:
        label = str(payload.get("sentiment") or "").strip().lower()
        sentiment = label if label in _SENTIMENTS else None

    return {"summary": summary.strip(), "keywords": keywords, "sentiment": sentiment}


class OpenAIService:
    """Summary generation, translation, OCR and transcription over one AsyncOpenAI client."""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self._settings = settings
        self._client = client
        if self._client is None and self.is_configured():
            self._client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.openai_timeout_seconds,
                max_retries=settings.openai_max_retries,
            )

    def is_configured(self) -> bool:
        key = self._settings.openai_api_key.strip()
        return bool(key) and key != PLACEHOLDER_API_KEY

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            raise ConfigurationError(
                "OpenAI API key not configured. Set OPENAI_API_KEY in the environment or .env file."
            )
        return self._client

    async def _chat(self, model: str, messages: list[dict], temperature: float, json_mode: bool = False) -> str:
        client = self._get_client()
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": self._settings.summary_max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await client.chat.completions.create(**kwargs)
        return (response.choices[0].message.content or "").strip()

    async def generate_summary(self, text: str, options: SummaryOptions) -> SummaryResult:
        if not text or not text.strip():
            raise ValueError("Text cannot be empty for summarization.")

        prompt = _build_summary_prompt(text, options)
        try:
            raw = await self._chat(
                self._settings.openai_model,
                [
                    {"role": "system", "content": _SUMMARY_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
                json_mode=True,
            )
        except AuthenticationError as exc:
            logger.warning("OpenAI summarization failed: invalid API key")
            raise GenerationError("Failed to generate summary: invalid OpenAI API key") from exc
        except RateLimitError as exc:
            logger.warning("OpenAI summarization failed: rate limit exceeded")
            raise GenerationError("Failed to generate summary: OpenAI rate limit exceeded") from exc
        except APITimeoutError as exc:
            logger.warning("OpenAI summarization timed out")
            raise GenerationError("Failed to generate summary: request timed out") from exc
        except APIError as exc:
            logger.warning("OpenAI summarization failed: %s", exc)
            raise GenerationError(f"Failed to generate summary: {exc}") from exc

        fields = _parse_summary_payload(raw, options)
        result = SummaryResult(
            **fields,
            word_count=WordCount(original=count_words(text), summary=count_words(fields["summary"])),
            language=SOURCE_LANGUAGE,
        )

        if options.target_language and options.target_language != SOURCE_LANGUAGE:
            translation = await self.translate_text(result.summary, options.target_language)
            result = result.model_copy(
                update={"translation": translation, "target_language": options.target_language}
            )

        return result

    async def translate_text(self, text: str, target_language: str) -> str:
        language_name = LANGUAGE_NAMES.get(target_language, target_language)
        try:
            return await self._chat(
                self._settings.openai_model,
                [
                    {
                        "role": "system",
                        "content": (
                            f"You are a professional translator. Translate the given text to {language_name} "
                            "while maintaining the original meaning and tone."
                        ),
                    },
                    {"role": "user", "content": f"Translate this text to {language_name}:\n\n{text}"},
                ],
                temperature=0.1,
            )
        except APIError as exc:
            logger.warning("OpenAI translation to %s failed: %s", target_language, exc)
            raise GenerationError(f"Failed to translate text: {exc}") from exc

    async def extract_text_from_image(self, data: bytes, media_type: str = "") -> str:
        mime = media_type if media_type.startswith("image/") else "image/png"
        data_url = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
        try:
            return await self._chat(
                self._settings.openai_vision_model,
                [
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": _OCR_PROMPT},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    }
                ],
                temperature=0.0,
            )
        except APIError as exc:
            logger.warning("OpenAI image text extraction failed: %s", exc)
            raise OcrError(f"Failed to extract text from image: {exc}", cause=exc) from exc

    async def speech_to_text(self, data: bytes, file_name: str = "audio.wav", language: str = SOURCE_LANGUAGE) -> str:
        client = self._get_client()
        audio = io.BytesIO(data)
        audio.name = file_name or "audio.wav"
        try:
            response = await client.audio.transcriptions.create(
                file=audio,
                model=self._settings.openai_transcription_model,
                language=language,
            )
        except APIError as exc:
            logger.warning("OpenAI transcription failed: %s", exc)
            raise TranscriptionError(f"Failed to transcribe audio: {exc}") from exc
        return (response.text or "").strip()
