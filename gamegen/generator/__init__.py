"""
Generator module - Orchestrates artifact generation.

Main entry points are ``generate_specification`` and
``implement_artifact``; both return a GenerationResult and never raise.
"""

from .orchestrator import (
    GenerationOrchestrator,
    generate_specification,
    implement_artifact,
)

__all__ = [
    'GenerationOrchestrator',
    'generate_specification',
    'implement_artifact',
]
