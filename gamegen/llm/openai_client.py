"""
OpenAI LLM Client implementation.

Provides GPT model access through the Chat Completions API.
"""

from typing import Optional, Iterator, Any

from .base import BaseLLMClient, require_credential, int_or_none
from ..core.config import ProviderConfig
from ..core.errors import TransportError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class OpenAIClient(BaseLLMClient):
    """OpenAI client using streamed chat completions."""

    def __init__(self, config: ProviderConfig, client: Any = None):
        """
        Initialize the OpenAI client.

        Args:
            config: Provider configuration
            client: Optional pre-built ``openai.OpenAI`` instance

        Raises:
            MissingCredentialError: If no API key is configured
        """
        super().__init__(config)
        self._api_key = require_credential(config, "Set OPENAI_API_KEY or provider.credential")
        self._client = client

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def client(self):
        """Lazy-load the SDK client."""
        if self._client is None:
            import openai

            self._client = openai.OpenAI(
                api_key=self._api_key,
                timeout=self.config.timeout,
                max_retries=self.config.max_retries,
            )
        return self._client

    def stream_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
    ) -> Iterator[str]:
        import openai

        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        try:
            stream = self.client.chat.completions.create(
                model=self.config.model,
                messages=messages,
                temperature=self.config.temperature,
                max_completion_tokens=self.config.max_tokens,
                stream=True,
                stream_options={"include_usage": True},
            )

            for chunk in stream:
                usage = getattr(chunk, "usage", None)
                if usage is not None:
                    self._last_usage["input_tokens"] = int_or_none(getattr(usage, "prompt_tokens", None))
                    self._last_usage["output_tokens"] = int_or_none(getattr(usage, "completion_tokens", None))

                # The trailing usage chunk carries no choices
                if not chunk.choices:
                    continue

                choice = chunk.choices[0]
                if choice.finish_reason:
                    self._last_usage["finish_reason"] = choice.finish_reason
                text = choice.delta.content if choice.delta else None
                if text:
                    yield text

        except openai.APIStatusError as e:
            raise TransportError(f"OpenAI error ({e.status_code}): {e.message}") from e
        except openai.OpenAIError as e:
            raise TransportError(f"OpenAI connection error: {e}") from e
