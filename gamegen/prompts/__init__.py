"""
Prompts module - Deterministic prompt rendering.
"""

from .builder import (
    BuiltPrompt,
    build_prompt,
    inline_documents,
    attachment_documents,
    SPEC_SYSTEM_INSTRUCTION,
    IMPLEMENTATION_SYSTEM_INSTRUCTION,
)

__all__ = [
    'BuiltPrompt',
    'build_prompt',
    'inline_documents',
    'attachment_documents',
    'SPEC_SYSTEM_INSTRUCTION',
    'IMPLEMENTATION_SYSTEM_INSTRUCTION',
]
