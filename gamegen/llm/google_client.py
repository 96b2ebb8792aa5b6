"""
Google Gemini LLM Client implementation.

Provides Gemini model access through the google-genai SDK. The helpers
here are shared with the Files API client in google_files.py.
"""

from contextlib import contextmanager
from typing import Optional, Iterator, Any, Dict, Iterable

from .base import BaseLLMClient, require_credential, int_or_none
from ..core.config import ProviderConfig
from ..core.errors import TransportError
from ..utils.logger import get_logger

logger = get_logger(__name__)


def create_genai_client(api_key: str, timeout: int):
    """Build a google-genai client; timeout is in seconds."""
    from google import genai

    return genai.Client(api_key=api_key, http_options={"timeout": timeout * 1000})


@contextmanager
def translate_google_errors(action: str):
    """
    Re-raise SDK and HTTP failures as TransportError.

    Args:
        action: What was being attempted, for the error message
    """
    import httpx
    from google.genai import errors

    try:
        yield
    except errors.APIError as e:
        raise TransportError(f"Gemini {action} failed ({e.code}): {e.message}") from e
    except httpx.HTTPError as e:
        raise TransportError(f"Gemini {action} failed: {type(e).__name__}: {e}") from e


def build_generation_config(config: ProviderConfig, system_instruction: Optional[str]) -> Dict[str, Any]:
    """Generation settings in the SDK's dict form."""
    generation_config: Dict[str, Any] = {
        "temperature": config.temperature,
        "max_output_tokens": config.max_tokens,
    }
    if system_instruction:
        generation_config["system_instruction"] = system_instruction
    return generation_config


def drain_chunks(chunks: Iterable[Any], usage: Dict[str, Any]) -> Iterator[str]:
    """
    Yield text from ``generate_content_stream`` chunks in arrival order.

    Token counts from the last chunk that reports them are written into
    ``usage``.
    """
    for chunk in chunks:
        metadata = getattr(chunk, "usage_metadata", None)
        if metadata is not None:
            usage["input_tokens"] = int_or_none(getattr(metadata, "prompt_token_count", None))
            usage["output_tokens"] = int_or_none(getattr(metadata, "candidates_token_count", None))

        text = getattr(chunk, "text", None)
        if isinstance(text, str) and text:
            yield text


class GoogleClient(BaseLLMClient):
    """Gemini client for direct text prompts (no file attachments)."""

    def __init__(self, config: ProviderConfig, client: Any = None):
        """
        Initialize the Gemini client.

        Args:
            config: Provider configuration
            client: Optional pre-built ``google.genai.Client`` instance

        Raises:
            MissingCredentialError: If no API key is configured
        """
        super().__init__(config)
        self._api_key = require_credential(config, "Set GEMINI_API_KEY or provider.credential")
        self._client = client

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def client(self):
        """Lazy-load the SDK client."""
        if self._client is None:
            self._client = create_genai_client(self._api_key, self.config.timeout)
        return self._client

    def stream_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
    ) -> Iterator[str]:
        with translate_google_errors("generate"):
            chunks = self.client.models.generate_content_stream(
                model=self.config.model,
                contents=prompt,
                config=build_generation_config(self.config, system_instruction),
            )
            yield from drain_chunks(chunks, self._last_usage)
