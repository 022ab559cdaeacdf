from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_vision_model: str = "gpt-4o-mini"
    openai_transcription_model: str = "whisper-1"
    openai_timeout_seconds: float = 60.0
    openai_max_retries: int = 2
    summary_max_tokens: int = 1000

    max_file_size_mb: int = 10
    max_concurrent_files: int = 4

    firebase_credentials: str = ""
    summaries_page_size: int = 50

    log_level: str = "INFO"


settings = Settings()
