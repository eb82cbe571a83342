from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATA_DIR = Path("data")
DEFAULT_LLM_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = DEFAULT_DATA_DIR
    llm_api_key: Optional[str] = None
    llm_base_url: Optional[str] = None
    llm_model: str = DEFAULT_LLM_MODEL
    llm_temperature: float = 0.2
    llm_top_p: float = 0.9


def _as_float(value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        return default


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build settings from the environment, reading a ``.env`` file first."""
    load_dotenv(env_file)
    data_dir = os.environ.get("HR_CONSOLE_DATA_DIR")
    return Settings(
        data_dir=Path(data_dir) if data_dir else DEFAULT_DATA_DIR,
        llm_api_key=os.environ.get("OPENAI_API_KEY") or None,
        llm_base_url=os.environ.get("HR_CONSOLE_LLM_BASE_URL") or None,
        llm_model=os.environ.get("HR_CONSOLE_LLM_MODEL") or DEFAULT_LLM_MODEL,
        llm_temperature=_as_float(os.environ.get("HR_CONSOLE_LLM_TEMPERATURE"), 0.2),
        llm_top_p=_as_float(os.environ.get("HR_CONSOLE_LLM_TOP_P"), 0.9),
    )
