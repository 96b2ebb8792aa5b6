"""
Upload Lifecycle Manager - Stage, upload, wait for ACTIVE, clean up.

Drives the file-upload provider's protocol for one batch of documents:

1. Stage: copy every input into a per-request staging folder
2. Upload: submit each staged copy to remote storage
3. Poll: wait until every remote file is ACTIVE (or FAILED / timed out)
4. Cleanup: delete every remote file and staged copy, always

The batch is the unit of success: any failure aborts the whole batch and
callers never see a partial set of handles.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Protocol
import time

from .staging import StagingArea
from ..core.config import UploadConfig
from ..core.context import RequestContext, GenerationPhase
from ..core.errors import TransportError, UploadFailedError, UploadTimeoutError
from ..llm.base import LLMResponse
from ..llm.google_files import RemoteFile
from ..models import InputDocument, UploadedFileHandle, FileState
from ..utils.logger import get_logger, ProgressLogger

logger = get_logger(__name__)


class FilesClient(Protocol):
    """Remote storage operations the lifecycle needs."""

    def upload(self, path: Path, content_type: str, display_name: str) -> RemoteFile: ...

    def get_state(self, name: str) -> FileState: ...

    def delete(self, name: str) -> None: ...

    def generate_with_files(
        self,
        prompt: str,
        handles: List[UploadedFileHandle],
        system_instruction: Optional[str] = None,
    ) -> LLMResponse: ...


class UploadLifecycleManager:
    """
    Owns the upload handles of one generation call.

    Use ``upload_batch`` as a context manager; the handles it yields are
    valid only inside the ``with`` block.
    """

    def __init__(
        self,
        files_client: FilesClient,
        config: Optional[UploadConfig] = None,
        context: Optional[RequestContext] = None,
    ):
        """
        Initialize the manager.

        Args:
            files_client: Remote storage client
            config: Polling and staging settings
            context: Request context (cancellation, stats)
        """
        self.files_client = files_client
        self.config = config or UploadConfig()
        self.context = context or RequestContext()

    @contextmanager
    def upload_batch(
        self,
        documents: Sequence[InputDocument],
        anchor: Path,
        project_name: str,
    ) -> Iterator[List[UploadedFileHandle]]:
        """
        Upload a batch and yield its ACTIVE handles in input order.

        Every remote file created and every staged copy is deleted when the
        block exits, whether it completes, raises or is cancelled.

        Args:
            documents: Input documents, in prompt order
            anchor: Anchor directory that roots the staging area
            project_name: Project name, used to name the staging folder

        Yields:
            Handles in the same order as ``documents``

        Raises:
            StagingError: If a document cannot be copied
            TransportError: If an upload request fails
            UploadFailedError: If storage reports a file FAILED
            UploadTimeoutError: If a file stays pending past the timeout
            GenerationCancelled: If the caller cancels mid-protocol
        """
        handles: List[UploadedFileHandle] = []
        staging = StagingArea(anchor, project_name, self.config.staging_folder, self.context)

        try:
            with staging:
                staged = self._stage(documents, staging)
                self._upload(documents, staged, handles)
                self._wait_until_active(handles)

                logger.info("All files ACTIVE")
                yield list(handles)
        finally:
            self._delete_remote(handles)

    def _stage(self, documents: Sequence[InputDocument], staging: StagingArea) -> List[Path]:
        self.context.enter_phase(GenerationPhase.STAGING)
        staged = []
        for document in documents:
            self.context.check_cancelled("staging")
            staged.append(staging.stage(document))
        return staged

    def _upload(
        self,
        documents: Sequence[InputDocument],
        staged: Sequence[Path],
        handles: List[UploadedFileHandle],
    ) -> None:
        self.context.enter_phase(GenerationPhase.UPLOADING)
        progress = ProgressLogger(logger, "Uploading files", total=len(documents))

        for document, path in zip(documents, staged):
            self.context.check_cancelled("upload")

            remote = self.files_client.upload(path, document.content_type, document.display_name)
            # Appended immediately so a later failure still deletes it
            handles.append(UploadedFileHandle(
                name=remote.name,
                uri=remote.uri,
                content_type=remote.content_type or document.content_type,
                display_name=document.display_name,
                staged_path=path,
                state=remote.state,
                created_at=time.monotonic(),
            ))
            self.context.stats.files_uploaded += 1
            progress.step(document.display_name)

        progress.complete()

    def _wait_until_active(self, handles: List[UploadedFileHandle]) -> None:
        """
        Poll all pending handles in rounds until every one is ACTIVE.

        Handles are polled independently: a FAILED handle aborts at once
        without waiting out the others.
        """
        self.context.enter_phase(GenerationPhase.POLLING)
        pending = [h for h in handles if not h.is_active]

        while pending:
            self.context.stats.poll_rounds += 1

            for handle in pending:
                self._refresh_state(handle)
                if handle.state is FileState.FAILED:
                    raise UploadFailedError(
                        f"File failed processing: {handle.display_name} ({handle.name})"
                    )

            pending = [h for h in pending if not h.is_active]
            if not pending:
                break

            now = time.monotonic()
            expired = [h for h in pending if now - h.created_at > self.config.timeout]
            if expired:
                names = ", ".join(h.display_name for h in expired)
                raise UploadTimeoutError(
                    f"Timed out after {self.config.timeout:g}s waiting for ACTIVE: {names}"
                )

            self.context.wait(self.config.poll_interval)

    def _refresh_state(self, handle: UploadedFileHandle) -> None:
        try:
            handle.state = self.files_client.get_state(handle.name)
        except TransportError as e:
            # A failed status check is not a failed file; retry next round
            logger.debug(f"Status check for {handle.name} failed, still pending: {e}")

    def _delete_remote(self, handles: List[UploadedFileHandle]) -> None:
        for handle in handles:
            try:
                self.files_client.delete(handle.name)
                self.context.stats.files_deleted += 1
                logger.debug(f"Deleted remote file {handle.name}")
            except Exception as e:
                # Logged and swallowed so the remaining handles are still deleted
                self.context.stats.cleanup_failures += 1
                logger.warning(f"Failed to delete remote file {handle.name}: {type(e).__name__}: {e}")
