"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    api_key: str

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # "{url}" is replaced with the percent-encoded target; empty fetches directly
    proxy_url_template: str = "https://corsproxy.io/?{url}"
    request_timeout: float = 20.0
    user_agent: str = "visualsense/0.1.0"

    max_candidates: int = Field(4, ge=1)

    allowed_callback_hosts: str = ""
    callback_max_retries: int = Field(3, ge=0)

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
