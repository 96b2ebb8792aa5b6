"""
Output module - Artifact persistence.
"""

from .writer import ArtifactWriter

__all__ = [
    'ArtifactWriter',
]
