"""Application configuration management."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    # HTTP Configuration
    request_timeout: int = 30
    user_agent: str = "apprtc-client/1.0"
    max_redirects: int = 10

    # TURN request headers
    turn_origin: str = "https://apprtc.appspot.com"
    turn_user_agent: str = "Mozilla/5.0"

    # Push channel Configuration
    channel_url_template: str = "{ws_base}/channel?token={token}"
    channel_open_timeout: float = 10.0

    # Logging Configuration
    log_level: str = "INFO"
    html_excerpt_length: int = 500

    # Model Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Global settings instance
settings = Settings()
