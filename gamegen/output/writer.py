"""
Artifact Writer - Name and persist generated artifacts.

Artifacts are named ``{project}-{tag}-{timestamp}{ext}`` and written via a
temporary file in the target directory that is then linked into place, so
a crash never leaves a half-written artifact under the final name and two
writers never claim the same name.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional
import os
import shutil
import tempfile

from ..core.errors import WriteFailedError
from ..models import TaskKind
from ..utils.logger import get_logger
from ..utils.naming import artifact_timestamp, safe_filename, unique_path

logger = get_logger(__name__)


class ArtifactWriter:
    """Writes generated text to uniquely named files."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the writer.

        Args:
            clock: Returns the current time (defaults to UTC now)
        """
        self._clock = clock

    def artifact_name(self, project_name: str, task_kind: TaskKind) -> str:
        """Build the artifact file name for the current time."""
        now = self._clock() if self._clock else None
        return (
            f"{safe_filename(project_name)}-{task_kind.artifact_tag}-"
            f"{artifact_timestamp(now)}{task_kind.extension}"
        )

    def write(
        self,
        directory: Path | str,
        project_name: str,
        task_kind: TaskKind,
        content: str,
    ) -> Path:
        """
        Write an artifact and return its path.

        The directory is created if needed. An existing file with the same
        name is never overwritten; a numeric suffix is added instead.

        Args:
            directory: Output directory
            project_name: Project the artifact belongs to
            task_kind: Kind of artifact (selects tag and extension)
            content: Text to write

        Returns:
            Path of the written artifact

        Raises:
            WriteFailedError: If the directory or file cannot be written
        """
        directory = Path(directory)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WriteFailedError(f"Cannot create output directory {directory}: {e}") from e

        name = self.artifact_name(project_name, task_kind)
        try:
            fd, temp_name = tempfile.mkstemp(dir=directory, prefix=f".{name}.", suffix=".tmp")
        except OSError as e:
            raise WriteFailedError(f"Cannot write to {directory}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            target = self._claim(Path(temp_name), directory / name)
        except OSError as e:
            raise WriteFailedError(f"Failed to write {name} in {directory}: {e}") from e
        finally:
            _remove_quietly(Path(temp_name))

        logger.info(f"Artifact written to: {target}")
        return target

    @staticmethod
    def _claim(temp_path: Path, desired: Path) -> Path:
        """
        Move the finished file to the first free name; never overwrites.

        Hard links are used where the filesystem supports them, otherwise
        the content is copied into a file opened with exclusive create.
        """
        while True:
            target = unique_path(desired)
            try:
                os.link(temp_path, target)
                return target
            except FileExistsError:
                # Another writer took this name between the check and the link
                continue
            except OSError as e:
                logger.debug(f"Hard link to {target} failed ({e}); copying instead")

            try:
                _copy_exclusive(temp_path, target)
                return target
            except FileExistsError:
                continue


def _copy_exclusive(source: Path, target: Path) -> None:
    with open(target, "xb") as dst:
        try:
            with open(source, "rb") as src:
                shutil.copyfileobj(src, dst)
        except OSError:
            dst.close()
            _remove_quietly(target)
            raise


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {path}: {e}")
