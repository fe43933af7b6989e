"""Runtime configuration for the chat-completions backend."""

import os
from dataclasses import dataclass

API_KEY_ENV = "MISTRAL_API_KEY"

DEFAULT_API_URL = "https://api.mistral.ai/v1/chat/completions"
DEFAULT_MODEL = "codestral-2412"
DEFAULT_MAX_TOKENS = 8192


@dataclass
class VibecodeConfig:
    """Configuration for the chat-completions client."""

    api_key: str | None = None
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS

    # Network timeouts (seconds); reads are long because generations stream slowly
    connect_timeout: float = 10.0
    read_timeout: float = 180.0

    @classmethod
    def from_env(cls) -> "VibecodeConfig":
        """Build a configuration from environment variables.

        The API key may be absent here; requests fail before any network call
        when it is still missing at request time.
        """
        return cls(
            api_key=os.getenv(API_KEY_ENV) or None,
            api_url=os.getenv("VIBECODE_API_URL", DEFAULT_API_URL),
            model=os.getenv("VIBECODE_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("VIBECODE_MAX_TOKENS", str(DEFAULT_MAX_TOKENS))),
        )
