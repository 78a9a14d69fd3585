"""
Completion service seam.

Both the JD structurer and the ATS scorer talk to the LLM only through
``CompletionService``: a configured flag plus one text-in/text-out call.
Construct one service per process and pass it to both engines.
"""

from typing import Optional, Protocol, runtime_checkable

from loguru import logger
from openai import AsyncOpenAI

from .config import Settings, get_settings
from .errors import AIUnavailableError

PLACEHOLDER_API_KEYS = frozenset({"your_openai_api_key_here", "sk-..."})


@runtime_checkable
class CompletionService(Protocol):
    """Text-in/text-out generative completion."""

    @property
    def is_configured(self) -> bool: ...

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str: ...


def require_configured(service: CompletionService, purpose: str = "this operation") -> None:
    """Raise AIUnavailableError unless ``service`` has a usable configuration."""
    if not service.is_configured:
        raise AIUnavailableError(
            f"AI completion is required for {purpose}. "
            "Please configure OPENAI_API_KEY in your .env file."
        )


class OpenAICompletionService:
    """CompletionService backed by OpenAI chat completions."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ):
        self.settings = settings or get_settings()
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client: Optional[AsyncOpenAI] = None
        self._configured: Optional[bool] = None

    @property
    def is_configured(self) -> bool:
        """Whether an API key is present; checked once and remembered."""
        if self._configured is None:
            api_key = self.settings.openai_api_key.get_secret_value().strip()
            self._configured = bool(api_key) and api_key not in PLACEHOLDER_API_KEYS
            if not self._configured:
                logger.warning("OpenAI API key is not configured; AI features disabled")
        return self._configured

    @property
    def client(self) -> AsyncOpenAI:
        """Get or create OpenAI client."""
        if self._client is None:
            require_configured(self)
            kwargs = {"api_key": self.settings.openai_api_key.get_secret_value()}
            if self.settings.openai_base_url:
                kwargs["base_url"] = self.settings.openai_base_url
            if self.settings.openai_timeout_seconds is not None:
                kwargs["timeout"] = self.settings.openai_timeout_seconds
            self._client = AsyncOpenAI(**kwargs)
        return self._client

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Send one prompt and return the raw reply text ('' when empty)."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = await self.client.chat.completions.create(
            model=self.settings.openai_model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},  # Force JSON response
        )

        content = response.choices[0].message.content
        return content or ""
