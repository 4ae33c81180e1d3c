"""
Runtime configuration for the BookBot Relay service.

Settings are read once at startup from the process environment (and an
optional ``.env`` file) and passed explicitly to the components that need
them.
"""

import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_API_URL = "https://router.huggingface.co/v1/chat/completions"

# Levels accepted by uvicorn
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")

DEFAULT_MOOD_MODEL = "meta-llama/Llama-3.2-3B-Instruct"

# Tried in this order; the first model that answers wins.
DEFAULT_REPLY_MODELS = [
    "Qwen/Qwen2.5-72B-Instruct",
    "meta-llama/Llama-3.2-3B-Instruct",
    "microsoft/Phi-3.5-mini-instruct",
]


class Settings(BaseModel):
    """Validated service configuration."""

    hf_token: str = Field(..., min_length=1, description="Bearer token for the API")
    host: str = Field("0.0.0.0", description="Interface the server binds to")
    port: int = Field(3000, ge=1, le=65535, description="Port the server listens on")
    api_url: str = Field(DEFAULT_API_URL, description="Chat-completion endpoint")
    mood_model: str = Field(DEFAULT_MOOD_MODEL, min_length=1)
    reply_models: list[str] = Field(default_factory=lambda: list(DEFAULT_REPLY_MODELS))
    request_timeout: float = Field(60.0, gt=0, description="Per-call timeout in seconds")
    log_level: str = Field("info")

    @field_validator("reply_models", mode="before")
    @classmethod
    def _split_models(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            value = [str(item).strip() for item in value if str(item).strip()]
        return value

    @field_validator("reply_models")
    @classmethod
    def _require_models(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one reply model is required")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}"
            )
        return level


# Environment variable -> Settings field
_ENV_FIELDS = {
    "HF_TOKEN": "hf_token",
    "HOST": "host",
    "PORT": "port",
    "INFERENCE_API_URL": "api_url",
    "MOOD_MODEL": "mood_model",
    "REPLY_MODELS": "reply_models",
    "REQUEST_TIMEOUT": "request_timeout",
    "LOG_LEVEL": "log_level",
}


def load_settings(
    env: Mapping[str, str] | None = None, dotenv: bool = True
) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from instead of ``os.environ``
        dotenv: Whether to load a ``.env`` file first (ignored when env is given)

    Returns:
        The validated Settings

    Raises:
        ConfigError: If HF_TOKEN is missing or a value does not validate
    """
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    values = {
        field: env[name] for name, field in _ENV_FIELDS.items() if env.get(name)
    }
    if "hf_token" not in values:
        raise ConfigError("HF_TOKEN is not set")

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
