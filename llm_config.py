# llm_config.py
"""
Central configuration for LLM usage in the mental health assistant app.

- UI_TEST_MODE: if True, do not call any real LLM, return dummy outputs.
- LLM_BASE_URL: base URL of the OpenAI-style chat completions server.
- CHAT_COMPLETIONS_PATH: path of the chat completions endpoint on that server.
- CHAT_MODEL_NAME: model used by the AI support chat.
- ANALYSIS_MODEL_NAME: model used for check-in analysis and recommendations.
"""

import logging
import os


def _bool_env(name: str, default: str = "false") -> bool:
    value = os.getenv(name, default).strip().lower()
    return value in {"1", "true", "yes", "y"}


# If True, do not call any real LLM and always return dummy outputs.
UI_TEST_MODE: bool = _bool_env("UI_TEST_MODE", "false")

# Base URL for your vLLM / OpenAI-compatible server
LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "http://127.0.0.1:8000").rstrip("/")

CHAT_COMPLETIONS_PATH: str = os.getenv("CHAT_COMPLETIONS_PATH", "/v1/chat/completions")

BASE_MODEL_NAME: str = os.getenv("BASE_MODEL_NAME", "gpt-4o-mini")

CHAT_MODEL_NAME: str = os.getenv("CHAT_MODEL_NAME", BASE_MODEL_NAME)
ANALYSIS_MODEL_NAME: str = os.getenv("ANALYSIS_MODEL_NAME", BASE_MODEL_NAME)

# Optional API key
LLM_API_KEY: str | None = os.getenv("LLM_API_KEY", None)

# HTTP timeout
try:
    LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "60"))
except ValueError:
    LLM_TIMEOUT = 60.0

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def configure_logging(level: str | None = None) -> None:
    """Install the app-wide log format. Safe to call more than once."""
    logging.basicConfig(
        level=getattr(logging, level or LOG_LEVEL, logging.INFO),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
