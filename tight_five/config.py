"""Runtime settings, read from the environment (and .env) once at startup."""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = ROOT / "data"


class Settings(BaseModel):
    data_dir: Path = DEFAULT_DATA_DIR
    llm_provider_url: str = "https://api.openai.com"
    llm_api_key: str = ""
    llm_provider_format: Literal["openai", "koboldcpp"] = "openai"
    llm_model: str = "gpt-4o-mini"
    llm_timeout: float = Field(default=60.0, gt=0)
    rate_limit_max: int = Field(default=100, ge=1)
    rate_limit_window: float = Field(default=60.0, gt=0)
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"


def load_settings(env_file: Path | None = None) -> Settings:
    """Build Settings from environment variables, loading .env first if present.

    Variables already set in the environment win over .env values.
    """
    load_dotenv(env_file or ROOT / ".env")
    values: dict[str, str] = {}
    env_map = {
        "data_dir": "DATA_DIR",
        "llm_provider_url": "LLM_PROVIDER_URL",
        "llm_provider_format": "LLM_PROVIDER_FORMAT",
        "llm_model": "LLM_MODEL",
        "llm_timeout": "LLM_TIMEOUT",
        "rate_limit_max": "RATE_LIMIT_MAX",
        "rate_limit_window": "RATE_LIMIT_WINDOW",
        "host": "HOST",
        "port": "PORT",
        "log_level": "LOG_LEVEL",
    }
    for field, var in env_map.items():
        value = os.getenv(var)
        if value:
            values[field] = value
    api_key = os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY")
    if api_key:
        values["llm_api_key"] = api_key
    return Settings.model_validate(values)
