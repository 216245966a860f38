"""Application settings using Pydantic Settings."""

import logging
import os
import sys
import warnings

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Collaborator backend: static, litellm, gemini
    collaborator_type: str = "static"

    # LiteLLM (env: OPENAI_API_KEY, OPENAI_API_BASE)
    litellm_model: str = "gemini/gemini-2.5-flash"
    openai_api_key: str = ""
    openai_api_base: str = ""

    # Gemini (google-genai)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"

    # Generation
    llm_temperature: float = 0.2
    llm_max_retries: int = 2
    document_context_chars: int = 8000

    # Tagging / normalization
    merge_mode: str = "all"  # all, same-format, off
    tagging_max_iterations: int = 1000
    highlight_tag_prefix: str = "AI_GEN_CONTENT_"

    # Application
    app_name: str = "template_engine"
    log_level: str = "INFO"

    def configure_litellm_proxy(self) -> None:
        """Set OPENAI_* env vars so litellm picks them up."""
        if self.openai_api_base:
            os.environ["OPENAI_API_BASE"] = self.openai_api_base
        if self.openai_api_key:
            os.environ["OPENAI_API_KEY"] = self.openai_api_key

    def configure_logging(self) -> None:
        """Configure logging for the application."""
        logging.basicConfig(
            level=self.log_level.upper(),
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )
        # Suppress noisy Pydantic serialization warnings from LiteLLM
        warnings.filterwarnings("ignore", message="Pydantic serializer warnings")


# Global settings instance
settings = Settings()
settings.configure_litellm_proxy()
settings.configure_logging()
