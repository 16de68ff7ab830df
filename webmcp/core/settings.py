"""
Centralized settings (environment variables / .env), read at call time so
tests can override them.
"""
# @file purpose: Centralized settings using Pydantic Settings.

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WEBMCP_", env_file=".env", extra="ignore")

    headless: bool = True
    request_timeout_seconds: int = 30
    browser_timeout_ms: int = 30_000
    llm_model: str = "anthropic/claude-sonnet-4-5"
    llm_max_tokens: int = 4096
    snippet_chars: int = 3000
    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
