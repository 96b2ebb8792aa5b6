"""
Core module - Configuration and the error taxonomy.
"""

from .config import (
    ProviderKind,
    ProviderConfig,
    UploadConfig,
    LoggingConfig,
    AppConfig,
    DEFAULT_MODELS,
    get_default_config,
    load_config,
)
from .errors import (
    GenerationError,
    InvalidRequestError,
    MissingCredentialError,
    AnchorNotFoundError,
    TransportError,
    UploadFailedError,
    UploadTimeoutError,
    WriteFailedError,
    DocumentReadError,
    StagingError,
    GenerationCancelled,
)

__all__ = [
    # Config classes
    'ProviderKind',
    'ProviderConfig',
    'UploadConfig',
    'LoggingConfig',
    'AppConfig',
    'DEFAULT_MODELS',
    # Config functions
    'get_default_config',
    'load_config',
    # Errors
    'GenerationError',
    'InvalidRequestError',
    'MissingCredentialError',
    'AnchorNotFoundError',
    'TransportError',
    'UploadFailedError',
    'UploadTimeoutError',
    'WriteFailedError',
    'DocumentReadError',
    'StagingError',
    'GenerationCancelled',
]
