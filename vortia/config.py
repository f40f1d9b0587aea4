from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_BACKGROUND_VIDEO = (
    "https://database.blotato.io/storage/v1/object/public/public_media/"
    "4ddd33eb-e811-4ab5-93e1-2cd0b7e8fb3f/"
    "videogen2-render-e6b398a2-5859-4a77-88ef-2345bcefdc98.mp4"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Shared API key checked on every /api/v1 request (x-api-key header)
    vortia_api_key: str = ""

    # LLM providers
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    llm_provider: str = "openai"  # "openai" or "anthropic"
    openai_llm_model: str = "gpt-4o"
    claude_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 2048
    content_temperature: float = 0.8
    script_temperature: float = 0.7

    @field_validator("llm_provider")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        """Accept LLM_PROVIDER in any case; "claude" names the Anthropic provider."""
        value = value.strip().lower()
        return "anthropic" if value == "claude" else value

    # HeyGen avatar video
    heygen_api_key: str = ""
    heygen_api_base: str = "https://api.heygen.com"
    heygen_avatar_id: str = "Kristin_public_2_20240108"
    heygen_voice_id: str = "es-ES-AlvaroNeural"
    default_background_url: str = DEFAULT_BACKGROUND_VIDEO
    default_faceless_style: str = "cinematic"
    video_width: int = 1080
    video_height: int = 1920
    video_aspect_ratio: str = "9:16"

    # Outbound calls
    request_timeout_seconds: float = 60.0

    # Publishing fan-out
    publish_max_workers: int = 4
    publish_timeout_seconds: float = 30.0

    # Listing windows
    recent_publications_limit: int = 5
    publications_list_limit: int = 50
    videos_list_limit: int = 20

    # Logs
    logs_dir: str = "data/logs"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    return Settings()
