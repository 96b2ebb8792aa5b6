"""
Anthropic LLM Client implementation.

Provides Claude model access through the Anthropic Messages API.
"""

from typing import Optional, Iterator, Any

from .base import BaseLLMClient, require_credential, int_or_none
from ..core.config import ProviderConfig
from ..core.errors import TransportError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AnthropicClient(BaseLLMClient):
    """
    Anthropic client for Claude models.

    Responses are streamed and concatenated; one ``messages.stream``
    request per call.
    """

    def __init__(self, config: ProviderConfig, client: Any = None):
        """
        Initialize the Anthropic client.

        Args:
            config: Provider configuration
            client: Optional pre-built ``anthropic.Anthropic`` instance

        Raises:
            MissingCredentialError: If no API key is configured
        """
        super().__init__(config)
        self._api_key = require_credential(config, "Set ANTHROPIC_API_KEY or provider.credential")
        self._client = client

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def client(self):
        """Lazy-load the SDK client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.Anthropic(
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
        import anthropic

        request = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_instruction:
            request["system"] = system_instruction

        try:
            with self.client.messages.stream(**request) as stream:
                for text in stream.text_stream:
                    yield text

                final = stream.get_final_message()
                usage = getattr(final, "usage", None)
                self._last_usage = {
                    "input_tokens": int_or_none(getattr(usage, "input_tokens", None)),
                    "output_tokens": int_or_none(getattr(usage, "output_tokens", None)),
                    "finish_reason": getattr(final, "stop_reason", None),
                }

        except anthropic.APIStatusError as e:
            raise TransportError(f"Anthropic error ({e.status_code}): {e.message}") from e
        except anthropic.APIError as e:
            raise TransportError(f"Anthropic connection error: {e}") from e
