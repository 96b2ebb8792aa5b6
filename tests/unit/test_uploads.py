"""Unit tests for anchor discovery, staging and the upload lifecycle."""

import threading
import pytest
from pathlib import Path

from gamegen.core.config import UploadConfig
from gamegen.core.context import RequestContext
from gamegen.core.errors import (
    AnchorNotFoundError,
    MissingCredentialError,
    StagingError,
    TransportError,
    UploadFailedError,
    UploadTimeoutError,
    GenerationCancelled,
)
from gamegen.llm import MockFilesClient
from gamegen.models import InputDocument, DocumentRole, FileState
from gamegen.uploads import (
    find_anchor_directory,
    load_anchor_credential,
    StagingArea,
    UploadLifecycleManager,
)


FAST_POLLING = UploadConfig(poll_interval=0.01, timeout=0.1)


@pytest.fixture
def anchor(tmp_path):
    (tmp_path / ".env").write_text("GEMINI_API_KEY=test-key\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def documents(tmp_path):
    inputs = tmp_path / "inputs"
    inputs.mkdir()
    (inputs / "a.txt").write_text("alpha", encoding="utf-8")
    (inputs / "b.md").write_text("# beta", encoding="utf-8")
    return [
        InputDocument.from_path(inputs / "a.txt", DocumentRole.SOURCE),
        InputDocument.from_path(inputs / "b.md", DocumentRole.GUIDELINE),
    ]


def staging_leftovers(anchor: Path):
    root = anchor / "uploads-to-GenAI"
    return list(root.iterdir()) if root.exists() else []


class TestFindAnchorDirectory:
    """Tests for anchor discovery."""

    def test_marker_in_start(self, anchor):
        assert find_anchor_directory(anchor) == anchor.resolve()

    def test_marker_above_start(self, anchor):
        start = anchor / "out" / "specs"
        start.mkdir(parents=True)
        assert find_anchor_directory(start) == anchor.resolve()

    def test_start_need_not_exist(self, anchor):
        assert find_anchor_directory(anchor / "not" / "yet") == anchor.resolve()

    def test_bounded_search(self, anchor):
        start = anchor / "1" / "2" / "3" / "4" / "5"
        start.mkdir(parents=True)
        with pytest.raises(AnchorNotFoundError):
            find_anchor_directory(start, max_levels=5)
        assert find_anchor_directory(start, max_levels=6) == anchor.resolve()

    def test_custom_marker(self, tmp_path):
        (tmp_path / ".gamegen").write_text("", encoding="utf-8")
        assert find_anchor_directory(tmp_path, marker=".gamegen") == tmp_path.resolve()

    def test_directory_named_like_marker_ignored(self, tmp_path):
        (tmp_path / "a" / ".env").mkdir(parents=True)
        with pytest.raises(AnchorNotFoundError) as exc_info:
            find_anchor_directory(tmp_path / "a", max_levels=1)
        assert exc_info.value.kind == "AnchorNotFound"


class TestLoadAnchorCredential:
    """Tests for reading the key from the anchor .env file."""

    def test_reads_gemini_key(self, anchor):
        assert load_anchor_credential(anchor) == "test-key"

    def test_falls_back_to_google_key(self, tmp_path):
        (tmp_path / ".env").write_text("GEMINI_API_KEY=\nGOOGLE_API_KEY=google-key\n", encoding="utf-8")
        assert load_anchor_credential(tmp_path) == "google-key"

    def test_quoted_value(self, tmp_path):
        (tmp_path / ".env").write_text('GEMINI_API_KEY="quoted"\n', encoding="utf-8")
        assert load_anchor_credential(tmp_path) == "quoted"

    def test_missing_key(self, tmp_path):
        (tmp_path / ".env").write_text("OTHER=1\n", encoding="utf-8")
        with pytest.raises(MissingCredentialError) as exc_info:
            load_anchor_credential(tmp_path)
        assert "GEMINI_API_KEY" in str(exc_info.value)


class TestStagingArea:
    """Tests for StagingArea."""

    def test_stage_and_cleanup(self, anchor, documents):
        with StagingArea(anchor, "My Game") as staging:
            first = staging.stage(documents[0])
            second = staging.stage(documents[1])

            assert first.name == "001-a.txt"
            assert second.name == "002-b.md"
            assert first.read_text(encoding="utf-8") == "alpha"
            assert staging.directory.parent == anchor / "uploads-to-GenAI"
            assert staging.directory.name.startswith("My-Game-")

        assert not staging.directory.exists()
        assert staging_leftovers(anchor) == []

    def test_requests_get_separate_folders(self, anchor):
        first = StagingArea(anchor, "demo")
        second = StagingArea(anchor, "demo")
        assert first.directory != second.directory

    def test_same_basename_does_not_collide(self, anchor, tmp_path):
        (tmp_path / "x").mkdir()
        (tmp_path / "y").mkdir()
        (tmp_path / "x" / "notes.txt").write_text("x", encoding="utf-8")
        (tmp_path / "y" / "notes.txt").write_text("y", encoding="utf-8")

        with StagingArea(anchor, "demo") as staging:
            a = staging.stage(InputDocument.from_path(tmp_path / "x" / "notes.txt", DocumentRole.SOURCE))
            b = staging.stage(InputDocument.from_path(tmp_path / "y" / "notes.txt", DocumentRole.SOURCE))
            assert a.read_text(encoding="utf-8") == "x"
            assert b.read_text(encoding="utf-8") == "y"

    def test_missing_source(self, anchor, tmp_path):
        document = InputDocument.from_path(tmp_path / "missing.txt", DocumentRole.SOURCE)
        with pytest.raises(StagingError):
            with StagingArea(anchor, "demo") as staging:
                staging.stage(document)
        assert staging_leftovers(anchor) == []

    def test_cleanup_is_idempotent(self, anchor, documents):
        staging = StagingArea(anchor, "demo")
        with staging:
            staging.stage(documents[0])
        assert staging.cleanup() == 0

    def test_stage_after_close(self, anchor, documents):
        staging = StagingArea(anchor, "demo")
        with staging:
            pass
        with pytest.raises(StagingError):
            staging.stage(documents[0])

    def test_counts_staged_files(self, anchor, documents):
        context = RequestContext()
        with StagingArea(anchor, "demo", context=context) as staging:
            for document in documents:
                staging.stage(document)
        assert context.stats.files_staged == 2


class TestUploadLifecycle:
    """Tests for UploadLifecycleManager."""

    def test_happy_path(self, anchor, documents):
        files = MockFilesClient()
        manager = UploadLifecycleManager(files, FAST_POLLING)

        with manager.upload_batch(documents, anchor, "demo") as handles:
            assert [h.display_name for h in handles] == ["a.txt", "b.md"]
            assert all(h.state is FileState.ACTIVE for h in handles)
            assert [u["content"] for u in files.uploads] == [b"alpha", b"# beta"]
            assert len(files.live_files) == 2

        assert files.live_files == []
        assert len(files.deletes) == 2
        assert staging_leftovers(anchor) == []
        assert manager.context.stats.files_deleted == 2

    def test_uploads_staged_copies(self, anchor, documents):
        files = MockFilesClient()
        manager = UploadLifecycleManager(files, FAST_POLLING)

        with manager.upload_batch(documents, anchor, "demo") as handles:
            for upload, handle in zip(files.uploads, handles):
                assert upload["path"] == handle.staged_path
                assert upload["path"].parent.parent == anchor / "uploads-to-GenAI"

    def test_waits_for_slow_files(self, anchor, documents):
        files = MockFilesClient(polls_until_active=3)
        manager = UploadLifecycleManager(files, UploadConfig(poll_interval=0.01, timeout=5))

        with manager.upload_batch(documents, anchor, "demo") as handles:
            assert all(h.is_active for h in handles)

        assert manager.context.stats.poll_rounds == 3
        assert files.live_files == []

    def test_failed_file(self, anchor, documents):
        files = MockFilesClient(fail_files={"b.md"})
        manager = UploadLifecycleManager(files, FAST_POLLING)

        with pytest.raises(UploadFailedError):
            with manager.upload_batch(documents, anchor, "demo"):
                pytest.fail("batch should not be yielded")

        assert files.live_files == []
        assert staging_leftovers(anchor) == []

    def test_timeout(self, anchor, documents):
        files = MockFilesClient(stuck=True)
        manager = UploadLifecycleManager(files, FAST_POLLING)

        with pytest.raises(UploadTimeoutError) as exc_info:
            with manager.upload_batch(documents, anchor, "demo"):
                pass

        assert exc_info.value.kind == "UploadTimeout"
        assert files.live_files == []
        assert len(files.deletes) == 2
        assert staging_leftovers(anchor) == []

    def test_upload_error_deletes_earlier_uploads(self, anchor, documents):
        files = MockFilesClient(upload_errors={"b.md"})
        manager = UploadLifecycleManager(files, FAST_POLLING)

        with pytest.raises(TransportError):
            with manager.upload_batch(documents, anchor, "demo"):
                pass

        assert files.deletes == ["files/mock-1"]
        assert files.live_files == []
        assert staging_leftovers(anchor) == []

    def test_error_inside_block_cleans_up(self, anchor, documents):
        files = MockFilesClient()
        manager = UploadLifecycleManager(files, FAST_POLLING)

        with pytest.raises(RuntimeError):
            with manager.upload_batch(documents, anchor, "demo"):
                raise RuntimeError("generation blew up")

        assert files.live_files == []
        assert staging_leftovers(anchor) == []

    def test_delete_errors_are_swallowed(self, anchor, documents):
        files = MockFilesClient(delete_error=TransportError("delete failed"))
        manager = UploadLifecycleManager(files, FAST_POLLING)

        with manager.upload_batch(documents, anchor, "demo"):
            pass

        assert len(files.deletes) == 2
        assert manager.context.stats.cleanup_failures == 2

    def test_transient_status_errors_keep_polling(self, anchor, documents):

        class FlakyFiles(MockFilesClient):
            def __init__(self):
                super().__init__()
                self.failures = 0

            def get_state(self, name):
                if self.failures < 2:
                    self.failures += 1
                    raise TransportError("status check failed")
                return super().get_state(name)

        files = FlakyFiles()
        manager = UploadLifecycleManager(files, UploadConfig(poll_interval=0.01, timeout=5))

        with manager.upload_batch(documents, anchor, "demo") as handles:
            assert all(h.is_active for h in handles)

    def test_cancellation_during_polling(self, anchor, documents):
        cancel = threading.Event()

        class CancellingFiles(MockFilesClient):
            def get_state(self, name):
                cancel.set()
                return super().get_state(name)

        files = CancellingFiles(stuck=True)
        context = RequestContext(cancel_event=cancel)
        manager = UploadLifecycleManager(files, UploadConfig(poll_interval=5, timeout=60), context)

        with pytest.raises(GenerationCancelled):
            with manager.upload_batch(documents, anchor, "demo"):
                pass

        assert files.live_files == []
        assert staging_leftovers(anchor) == []

    def test_cancelled_before_start(self, anchor, documents):
        cancel = threading.Event()
        cancel.set()
        files = MockFilesClient()
        manager = UploadLifecycleManager(files, FAST_POLLING, RequestContext(cancel_event=cancel))

        with pytest.raises(GenerationCancelled):
            with manager.upload_batch(documents, anchor, "demo"):
                pass

        assert files.uploads == []
        assert staging_leftovers(anchor) == []
