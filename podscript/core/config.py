from typing import Literal

from pydantic import HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: Literal["development", "production"] = "development"
    log_level: str = "INFO"

    # Credentials are checked where they are used, so the app can start without them
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_lite_model: str = "gemini-2.5-flash-lite"

    exa_api_key: str | None = None
    search_num_results: int = 10

    elevenlabs_api_key: str | None = None
    elevenlabs_base_url: str = "https://api.elevenlabs.io"
    elevenlabs_model_id: str = "eleven_turbo_v2"
    elevenlabs_voice1: str = "UgBBYS2sOqTuMpoF3BR0"
    elevenlabs_voice2: str = "kPzsL2i3teMYv0FxEYQ6"
    elevenlabs_timeout_seconds: float = 60.0

    generation_timeout_seconds: float = 60.0
    generation_max_attempts: int = 3
    generation_base_delay_seconds: float = 1.0

    intro_target_words: int = 350
    subtopic_target_words: int = 400
    conclusion_target_words: int = 300
    max_expansion_iterations: int = 20
    expansion_concurrency: int = 1
    outline_subtopics: int = 4

    pipeline_deadline_seconds: float = 900.0

    sentry_dsn: HttpUrl | None = None
    sentry_traces_sample_rate: float | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )


settings = Settings()
