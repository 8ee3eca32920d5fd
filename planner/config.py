from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenRouter (OpenAI-compatible gateway, default provider)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"

    # Anthropic (optional)
    anthropic_api_key: str = ""

    # Google Gemini (optional)
    google_api_key: str = ""

    # Models
    default_model: str = "deepseek-chat"
    chat_temperature: float = 0.7
    document_temperature: float = 0.3
    llm_timeout_seconds: int = 30

    # Session memory
    max_messages_per_session: int = 50
    session_max_age_hours: int = 24

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Security
    planner_api_key: str = ""  # If set, require X-API-Key header on all requests

    # Agent limits
    max_concurrent_agent_runs: int = 5

    @field_validator("openrouter_api_key", "anthropic_api_key", "google_api_key", "planner_api_key")
    @classmethod
    def strip_keys(cls, v: str) -> str:
        return v.strip()

    @field_validator("max_messages_per_session")
    @classmethod
    def validate_message_cap(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_MESSAGES_PER_SESSION must be at least 1")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
