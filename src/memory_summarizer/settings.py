"""Centralized constants and environment-backed settings.

Non-secret, stable values live here in source control. Secrets (API keys)
come from the environment, optionally loaded from a .env file by the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


# --------------------- Result cache ---------------------

MAX_CACHE_SIZE: int = 100
CACHE_CLEANUP_THRESHOLD: int = 120


# --------------------- Transport ---------------------

MAX_ATTEMPTS: int = 3
RETRY_BASE_DELAY: float = 2.0  # seconds, multiplied by the attempt number
REQUEST_TIMEOUT: float = 60.0  # seconds, per attempt

DEFAULT_CALLBACKS_PER_TICK: int = 5


# --------------------- Providers ---------------------

DEFAULT_MODEL: str = "gpt-3.5-turbo"

OPENAI_URL: str = "https://api.openai.com/v1/chat/completions"
DEEPSEEK_URL: str = "https://api.deepseek.com/v1/chat/completions"
GOOGLE_URL: str = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "MODEL_PLACEHOLDER:generateContent?key=API_KEY_PLACEHOLDER"
)

PLAYER2_LOCAL_URL: str = "http://localhost:4315/v1"
PLAYER2_REMOTE_URL: str = "https://api.player2.game/v1"
PLAYER2_CLIENT_ID: str = os.getenv("PLAYER2_CLIENT_ID", "memory-summarizer")
PLAYER2_HEALTH_TIMEOUT: float = 2.0
PLAYER2_LOGIN_TIMEOUT: float = 3.0


# --------------------- Request payload ---------------------

TEMPERATURE: float = 0.7
MAX_OUTPUT_TOKENS: int = 200

SYSTEM_PROMPT: str = (
    "You are a memory summarization assistant for the members of a colony.\n"
    "Summarize the memories concisely and accurately.\n"
    "Output only the summary, with no explanation or formatting."
)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class SummarizerSettings:
    """Independently held provider settings.

    These are used whenever no external configuration is imported (or the
    import fails validation).
    """

    provider: str = "OpenAI"
    api_key: str = ""
    api_url: str = ""
    model: str = ""
    enable_prompt_caching: bool = False
    use_external_config: bool = False

    @classmethod
    def from_env(cls) -> "SummarizerSettings":
        """Build settings from ``SUMMARIZER_*`` environment variables."""
        return cls(
            provider=os.getenv("SUMMARIZER_PROVIDER", "OpenAI").strip(),
            api_key=os.getenv("SUMMARIZER_API_KEY", "").strip(),
            api_url=os.getenv("SUMMARIZER_API_URL", "").strip(),
            model=os.getenv("SUMMARIZER_MODEL", "").strip(),
            enable_prompt_caching=_env_flag("SUMMARIZER_PROMPT_CACHING"),
            use_external_config=_env_flag("SUMMARIZER_USE_EXTERNAL_CONFIG"),
        )
