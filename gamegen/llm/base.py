"""
Abstract base class for direct-text provider clients.

Defines the interface that every single-shot provider implements,
enabling the orchestrator to swap Anthropic, Google and OpenAI freely.
The file-upload provider does not implement this interface; see
google_files.py.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Iterator, Dict, Any

from ..core.config import ProviderConfig
from ..core.errors import MissingCredentialError
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LLMResponse:
    """Response from a provider call."""
    content: str

    # Token usage
    input_tokens: Optional[int] = None
    output_tokens: Optional[int] = None

    # Model info
    model_id: Optional[str] = None
    finish_reason: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()

    @property
    def total_tokens(self) -> Optional[int]:
        if self.input_tokens is None and self.output_tokens is None:
            return None
        return (self.input_tokens or 0) + (self.output_tokens or 0)

    @property
    def token_usage(self) -> Dict[str, Optional[int]]:
        """Get token usage as a dictionary."""
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "total_tokens": self.total_tokens,
        }


def int_or_none(value: Any) -> Optional[int]:
    """Keep provider usage counters only when they are real integers."""
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def require_credential(config: ProviderConfig, hint: Optional[str] = None) -> str:
    """
    Return the configured credential or fail before any network call.

    Raises:
        MissingCredentialError: If the credential is None, empty or blank
    """
    credential = (config.credential or "").strip()
    if not credential:
        raise MissingCredentialError(config.provider.value, hint)
    return credential


class BaseLLMClient(ABC):
    """
    Abstract base class for direct-text provider clients.

    Subclasses implement ``stream_text``; ``send_text`` drains that stream
    into one string, keeping chunks in arrival order. Each call makes one
    outbound request.
    """

    def __init__(self, config: ProviderConfig):
        """
        Initialize the client.

        Args:
            config: Provider configuration (model, credential, limits)
        """
        self.config = config

        # Filled in by stream_text when the provider reports them
        self._last_usage: Dict[str, Any] = {}

    @abstractmethod
    def stream_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
    ) -> Iterator[str]:
        """
        Send a prompt and yield response text chunks as they arrive.

        Args:
            prompt: The user prompt
            system_instruction: Optional system instructions

        Yields:
            Text chunks

        Raises:
            TransportError: On network or HTTP failure
        """
        pass

    def send_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
    ) -> LLMResponse:
        """
        Send a prompt and return the full response text.

        An empty answer is returned as-is; callers decide what it means.

        Args:
            prompt: The user prompt
            system_instruction: Optional system instructions

        Returns:
            LLMResponse with the concatenated text

        Raises:
            TransportError: On network or HTTP failure
        """
        self._last_usage = {}
        logger.debug(f"Invoking {self.provider_name} model {self.model_id}")

        content = "".join(self.stream_text(prompt, system_instruction))

        return LLMResponse(
            content=content,
            input_tokens=self._last_usage.get("input_tokens"),
            output_tokens=self._last_usage.get("output_tokens"),
            model_id=self.model_id,
            finish_reason=self._last_usage.get("finish_reason"),
        )

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the provider name (e.g., 'anthropic', 'openai')."""
        pass

    @property
    def model_id(self) -> str:
        """Get the configured model ID."""
        return self.config.model or "default"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model_id})"
