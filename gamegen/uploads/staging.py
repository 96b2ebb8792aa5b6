"""
Per-request staging area for files awaiting upload.

Each request copies its inputs into its own uniquely named folder under
``<anchor>/<staging folder>``, so concurrent requests for the same project
never share staged files. The folder is removed when the area closes.
"""

from pathlib import Path
from typing import List, Optional
import shutil

from ..core.context import RequestContext
from ..core.errors import StagingError
from ..models import InputDocument
from ..utils.logger import get_logger
from ..utils.naming import safe_filename, generate_short_id

logger = get_logger(__name__)


class StagingArea:
    """
    Context manager owning one request's staged copies.

    Example:
        with StagingArea(anchor, "demo") as staging:
            path = staging.stage(document)
            ...
        # staged copies and the request folder are gone here
    """

    def __init__(
        self,
        anchor: Path,
        project_name: str,
        folder_name: str = "uploads-to-GenAI",
        context: Optional[RequestContext] = None,
    ):
        self.root = Path(anchor) / folder_name
        self.directory = self.root / f"{safe_filename(project_name)}-{generate_short_id()}"
        self.context = context
        self.staged: List[Path] = []
        self._closed = False

    def __enter__(self) -> 'StagingArea':
        try:
            self.directory.mkdir(parents=True, exist_ok=False)
        except OSError as e:
            raise StagingError(f"Cannot create staging folder {self.directory}: {e}") from e
        logger.debug(f"Staging folder: {self.directory}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.cleanup()
        return False

    def stage(self, document: InputDocument) -> Path:
        """
        Copy one input document into the staging folder.

        Copies are prefixed with their position so equal basenames from
        different folders do not collide.

        Raises:
            StagingError: If the copy fails
        """
        if self._closed:
            raise StagingError("Staging area is already closed")

        destination = self.directory / f"{len(self.staged) + 1:03d}-{document.display_name}"
        # Tracked before copying so a partial copy is still cleaned up
        self.staged.append(destination)

        try:
            shutil.copyfile(document.path, destination)
        except OSError as e:
            raise StagingError(f"Cannot stage {document.path}: {e}") from e

        if self.context is not None:
            self.context.stats.files_staged += 1
        return destination

    def cleanup(self) -> int:
        """
        Delete every staged copy and the request folder.

        Failures are logged and counted, never raised.

        Returns:
            Number of paths that could not be removed
        """
        if self._closed:
            return 0
        self._closed = True

        failures = 0
        for path in self.staged:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                failures += 1
                logger.warning(f"Failed to delete staged file {path}: {e}")

        try:
            self.directory.rmdir()
        except FileNotFoundError:
            pass
        except OSError as e:
            failures += 1
            logger.warning(f"Failed to remove staging folder {self.directory}: {e}")

        if failures and self.context is not None:
            self.context.stats.cleanup_failures += failures
        return failures
