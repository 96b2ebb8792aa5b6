"""
Anchor discovery and credential loading for the file-upload provider.

The anchor directory is the nearest directory at or above the output
directory that contains the marker file (``.env`` by default). It roots
the staging area and holds the Gemini API key.
"""

from pathlib import Path
from typing import Sequence

from dotenv import dotenv_values

from ..core.errors import AnchorNotFoundError, MissingCredentialError
from ..utils.logger import get_logger

logger = get_logger(__name__)


def find_anchor_directory(start: Path | str, marker: str = ".env", max_levels: int = 5) -> Path:
    """
    Walk upward from ``start`` looking for a directory containing ``marker``.

    At most ``max_levels`` directories are checked, ``start`` included;
    the walk also stops at the filesystem root. ``start`` need not exist.

    Args:
        start: Directory to start from (usually the output directory)
        marker: File name that marks the anchor
        max_levels: Maximum number of directories to check

    Returns:
        The anchor directory

    Raises:
        AnchorNotFoundError: If no marker is found within the bound
    """
    current = Path(start).expanduser().resolve()

    for _ in range(max_levels):
        candidate = current / marker
        logger.debug(f"Checking for {marker} at: {candidate}")
        if candidate.is_file():
            logger.debug(f"Found {marker} at: {candidate}")
            return current

        parent = current.parent
        if parent == current:
            logger.debug("Reached filesystem root, stopping search")
            break
        current = parent

    raise AnchorNotFoundError(str(start), marker, max_levels)


def load_anchor_credential(
    anchor: Path,
    marker: str = ".env",
    key_names: Sequence[str] = ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
) -> str:
    """
    Read the generation key from the anchor's marker file.

    The first non-empty value among ``key_names`` wins.

    Args:
        anchor: Anchor directory
        marker: Marker file name
        key_names: Variable names to try, in order

    Returns:
        The API key

    Raises:
        MissingCredentialError: If none of the names has a value
    """
    env_path = Path(anchor) / marker
    values = dotenv_values(env_path)

    for name in key_names:
        value = values.get(name)
        if value and value.strip():
            logger.debug(f"Using {name} from {env_path}")
            return value.strip()

    primary = key_names[0] if key_names else "GEMINI_API_KEY"
    raise MissingCredentialError(
        "google_files",
        f"{primary} not found in {env_path}. Please add: {primary}=your_key",
    )
