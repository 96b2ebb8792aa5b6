"""
Data models for generation requests, uploads and results.
"""

from .generation_model import (
    DocumentRole,
    TaskKind,
    InputDocument,
    GenerationRequest,
    FileState,
    UploadedFileHandle,
    PromptDocument,
    GenerationResult,
    DEFAULT_CONTENT_TYPE,
)

__all__ = [
    # Enums
    'DocumentRole',
    'TaskKind',
    'FileState',
    # Inputs
    'InputDocument',
    'GenerationRequest',
    'PromptDocument',
    # Uploads
    'UploadedFileHandle',
    # Results
    'GenerationResult',
    'DEFAULT_CONTENT_TYPE',
]
