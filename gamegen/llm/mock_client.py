"""
Mock provider clients for testing and offline runs.

Provides configurable responses and an in-memory remote file store
without making actual API calls.
"""

from typing import Optional, Iterator, List, Dict, Any, Set
from pathlib import Path
import itertools
import time

from .base import BaseLLMClient, LLMResponse
from .google_files import RemoteFile
from ..core.config import ProviderConfig, ProviderKind
from ..core.errors import TransportError
from ..models import FileState, UploadedFileHandle


class MockLLMClient(BaseLLMClient):
    """
    Mock direct-text client for testing.

    Can be configured with:
    - Static responses
    - Response sequences
    - Simulated delays
    - Error simulation
    """

    CHUNK_SIZE = 16

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        default_response: str = "This is a mock response.",
        delay: float = 0.0,
    ):
        """
        Initialize the mock client.

        Args:
            config: Provider configuration (defaults to the mock provider)
            default_response: Default response when no specific response is set
            delay: Simulated delay in seconds
        """
        super().__init__(config or ProviderConfig(provider=ProviderKind.MOCK, credential="mock"))
        self.default_response = default_response
        self.delay = delay

        self._responses: List[str] = []
        self._response_index = 0
        self._error_after: Optional[int] = None  # Fail after N calls

        # Call tracking
        self.calls: List[Dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    def set_responses(self, responses: List[str]) -> None:
        """
        Set a sequence of responses to return.

        Responses are returned in order, then cycle back to the beginning.
        """
        self._responses = responses
        self._response_index = 0

    def set_error_after(self, n: int) -> None:
        """Configure to raise TransportError after N successful calls."""
        self._error_after = n

    def stream_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
    ) -> Iterator[str]:
        """
        Yield the mock response in fixed-size chunks.

        Raises:
            TransportError: When error simulation is active
        """
        self.calls.append({
            "prompt": prompt,
            "system_instruction": system_instruction,
        })

        if self.delay > 0:
            time.sleep(self.delay)

        if self._error_after is not None and len(self.calls) > self._error_after:
            raise TransportError("Simulated error after N calls")

        if self._responses:
            content = self._responses[self._response_index % len(self._responses)]
            self._response_index += 1
        else:
            content = self.default_response

        # Rough token estimate
        self._last_usage = {
            "input_tokens": int(len(prompt.split()) * 1.3),
            "output_tokens": int(len(content.split()) * 1.3),
            "finish_reason": "end_turn",
        }

        for start in range(0, len(content), self.CHUNK_SIZE):
            yield content[start:start + self.CHUNK_SIZE]

    @property
    def last_call(self) -> Optional[Dict[str, Any]]:
        """Get the most recent call."""
        return self.calls[-1] if self.calls else None

    @property
    def call_count(self) -> int:
        """Get total number of calls."""
        return len(self.calls)


class MockFilesClient:
    """
    In-memory stand-in for the Gemini Files API.

    Files start PENDING on upload. By default each file turns ACTIVE on its
    first poll; ``polls_until_active`` delays that, ``stuck=True`` keeps
    every file PENDING forever, and display names listed in ``fail_files``
    report FAILED. Every call is recorded so tests can assert the protocol.
    """

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        default_response: str = "This is a mock response.",
        polls_until_active: int = 1,
        stuck: bool = False,
        fail_files: Optional[Set[str]] = None,
        upload_errors: Optional[Set[str]] = None,
        generate_error: Optional[Exception] = None,
        delete_error: Optional[Exception] = None,
    ):
        self.config = config or ProviderConfig(provider=ProviderKind.GOOGLE_FILES, credential="mock")
        self.default_response = default_response
        self.polls_until_active = polls_until_active
        self.stuck = stuck
        self.fail_files = set(fail_files or ())
        self.upload_errors = set(upload_errors or ())
        self.generate_error = generate_error
        self.delete_error = delete_error

        self._ids = itertools.count(1)
        self._display_names: Dict[str, str] = {}
        self._poll_counts: Dict[str, int] = {}

        # Remote files not yet deleted, keyed by name
        self.files: Dict[str, RemoteFile] = {}

        # Call tracking
        self.uploads: List[Dict[str, Any]] = []
        self.state_checks: List[str] = []
        self.deletes: List[str] = []
        self.generate_calls: List[Dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "google_files"

    @property
    def model_id(self) -> str:
        return self.config.model

    def upload(self, path: Path, content_type: str, display_name: str) -> RemoteFile:
        path = Path(path)
        self.uploads.append({
            "path": path,
            "content_type": content_type,
            "display_name": display_name,
            "content": path.read_bytes(),
        })
        if display_name in self.upload_errors:
            raise TransportError(f"Gemini upload of {display_name} failed: simulated")

        name = f"files/mock-{next(self._ids)}"
        remote = RemoteFile(
            name=name,
            uri=f"https://mock.invalid/{name}",
            content_type=content_type,
            state=FileState.PENDING,
        )
        self.files[name] = remote
        self._display_names[name] = display_name
        self._poll_counts[name] = 0
        return remote

    def get_state(self, name: str) -> FileState:
        self.state_checks.append(name)
        self._poll_counts[name] = self._poll_counts.get(name, 0) + 1

        if self._display_names.get(name) in self.fail_files:
            return FileState.FAILED
        if self.stuck or self._poll_counts[name] < self.polls_until_active:
            return FileState.PENDING
        return FileState.ACTIVE

    def delete(self, name: str) -> None:
        self.deletes.append(name)
        if self.delete_error is not None:
            raise self.delete_error
        self.files.pop(name, None)

    def generate_with_files(
        self,
        prompt: str,
        handles: List[UploadedFileHandle],
        system_instruction: Optional[str] = None,
    ) -> LLMResponse:
        self.generate_calls.append({
            "prompt": prompt,
            "system_instruction": system_instruction,
            "file_uris": [h.uri for h in handles],
        })
        if self.generate_error is not None:
            raise self.generate_error
        return LLMResponse(content=self.default_response, model_id=self.model_id)

    @property
    def live_files(self) -> List[str]:
        """Remote files that were uploaded and never deleted."""
        return list(self.files)
