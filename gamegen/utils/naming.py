"""
Naming utilities for files and identifiers.

Provides helpers for filesystem-safe names, request identifiers,
artifact timestamps and collision-free paths.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
import os
import re
import uuid


# Characters that are reserved on at least one common filesystem
_RESERVED = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def generate_short_id(length: int = 8) -> str:
    """
    Generate a short random hex identifier.

    Args:
        length: Number of hex characters (max 32)

    Returns:
        Hex string
    """
    return uuid.uuid4().hex[:length]


def safe_filename(text: str) -> str:
    """
    Make text usable as part of a file name.

    Reserved characters and whitespace runs become single hyphens; case
    and non-ASCII letters are kept.

    Args:
        text: Input text

    Returns:
        Sanitized name (never empty)
    """
    text = _RESERVED.sub("-", text.strip())
    text = re.sub(r'\s+', '-', text)
    text = re.sub(r'-+', '-', text)
    text = text.strip('-.')
    return text or "unnamed"


def artifact_timestamp(now: Optional[datetime] = None) -> str:
    """
    UTC timestamp with second precision, safe for file names.

    Args:
        now: Time to format (defaults to the current time)

    Returns:
        Timestamp like ``2026-10-16T12-30-45``
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S")


def unique_path(path: Path) -> Path:
    """
    Return ``path``, or the first ``stem-N.suffix`` sibling that does not exist.

    Dangling symlinks count as taken.

    Args:
        path: Desired path

    Returns:
        A path that did not exist at the time of the call
    """
    if not os.path.lexists(path):
        return path

    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
        if not os.path.lexists(candidate):
            return candidate
        counter += 1
