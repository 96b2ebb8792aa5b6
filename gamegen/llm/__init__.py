"""
LLM module - Provider client abstractions.

Provides a unified interface for the direct-text providers:
- Anthropic (Claude)
- Google (Gemini)
- OpenAI (GPT)
- Mock (for testing)

and a separate Files API client for the file-upload provider, which is
only driven through the upload lifecycle.
"""

from typing import Optional

from .base import BaseLLMClient, LLMResponse, require_credential
from .anthropic_client import AnthropicClient
from .google_client import GoogleClient
from .openai_client import OpenAIClient
from .google_files import GoogleFilesClient, RemoteFile
from .mock_client import MockLLMClient, MockFilesClient
from ..core.config import ProviderConfig, ProviderKind

__all__ = [
    # Base classes
    'BaseLLMClient',
    'LLMResponse',
    'require_credential',
    # Implementations
    'AnthropicClient',
    'GoogleClient',
    'OpenAIClient',
    'GoogleFilesClient',
    'RemoteFile',
    'MockLLMClient',
    'MockFilesClient',
    # Factories
    'create_client',
    'create_files_client',
]


def create_client(config: ProviderConfig, **kwargs) -> BaseLLMClient:
    """
    Factory function to create a direct-text client.

    Args:
        config: Provider configuration
        **kwargs: Client-specific options (e.g. ``client`` for an SDK instance)

    Returns:
        Configured client instance

    Raises:
        ValueError: If the provider does not accept direct text prompts
        MissingCredentialError: If the provider's credential is missing
    """
    providers = {
        ProviderKind.ANTHROPIC: AnthropicClient,
        ProviderKind.GOOGLE: GoogleClient,
        ProviderKind.OPENAI: OpenAIClient,
        ProviderKind.MOCK: MockLLMClient,
    }

    if config.provider not in providers:
        raise ValueError(
            f"Provider {config.provider.value} needs uploaded files; "
            f"use create_files_client instead"
        )

    return providers[config.provider](config=config, **kwargs)


def create_files_client(
    config: ProviderConfig,
    credential: Optional[str],
    **kwargs,
) -> GoogleFilesClient:
    """
    Factory function to create the Files API client.

    Args:
        config: Provider configuration (must be the file-upload provider)
        credential: API key resolved from config or the anchor .env file
        **kwargs: Client-specific options

    Raises:
        ValueError: If the provider is not the file-upload provider
        MissingCredentialError: If the credential is empty
    """
    if not config.provider.uses_file_uploads:
        raise ValueError(f"Provider {config.provider.value} does not use file uploads")
    return GoogleFilesClient(config, credential, **kwargs)
