"""
Game artifact generator - Turn local documents into AI-generated artifacts.

Main modules:
- models: Requests, upload handles and results
- prompts: Deterministic prompt rendering
- llm: Provider client abstractions
- uploads: File-upload provider protocol (stage, upload, poll, cleanup)
- generator: Top-level orchestration
- output: Artifact persistence
- cli: Command-line interface
"""

from .cli import run_generation
from .generator import GenerationOrchestrator, generate_specification, implement_artifact
from .models import GenerationResult, TaskKind

__version__ = "1.0.0"

__all__ = [
    'run_generation',
    'GenerationOrchestrator',
    'generate_specification',
    'implement_artifact',
    'GenerationResult',
    'TaskKind',
    '__version__',
]
