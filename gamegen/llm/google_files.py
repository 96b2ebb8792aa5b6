"""
Gemini Files API client.

Remote storage for the file-upload provider: files are uploaded, polled
until ACTIVE, referenced by URI in a generation call, then deleted. This
client has no ``send_text``; it is only driven through
UploadLifecycleManager, which owns the handles it produces.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Any, List, Dict

from .base import LLMResponse, int_or_none
from .google_client import (
    create_genai_client,
    translate_google_errors,
    build_generation_config,
    drain_chunks,
)
from ..core.config import ProviderConfig
from ..core.errors import MissingCredentialError, UploadFailedError
from ..models import FileState, UploadedFileHandle, DEFAULT_CONTENT_TYPE
from ..utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RemoteFile:
    """What remote storage reports about one file."""
    name: str
    uri: str
    content_type: str
    state: FileState


class GoogleFilesClient:
    """
    Gemini client that works on uploaded files.

    Each method makes exactly one SDK request.
    """

    def __init__(self, config: ProviderConfig, credential: Optional[str], client: Any = None):
        """
        Initialize the Files client.

        Args:
            config: Provider configuration (model and limits)
            credential: API key, usually read from the anchor .env file
            client: Optional pre-built ``google.genai.Client`` instance

        Raises:
            MissingCredentialError: If the credential is empty
        """
        if not credential or not credential.strip():
            raise MissingCredentialError(
                config.provider.value,
                "Add GEMINI_API_KEY=your_key to the .env file in your project root",
            )
        self.config = config
        self._api_key = credential.strip()
        self._client = client

    @property
    def provider_name(self) -> str:
        return "google_files"

    @property
    def model_id(self) -> str:
        return self.config.model

    @property
    def client(self):
        """Lazy-load the SDK client."""
        if self._client is None:
            self._client = create_genai_client(self._api_key, self.config.timeout)
        return self._client

    def upload(self, path: Path, content_type: str, display_name: str) -> RemoteFile:
        """
        Upload one local file.

        Raises:
            TransportError: On network or HTTP failure
            UploadFailedError: If storage returns no file name
        """
        logger.info(f"Upload: {display_name} ({content_type})")
        with translate_google_errors(f"upload of {display_name}"):
            uploaded = self.client.files.upload(
                file=str(path),
                config={"mime_type": content_type, "display_name": display_name},
            )

        remote = _to_remote_file(uploaded, content_type)
        if not remote.name:
            raise UploadFailedError(f"Upload failed for {display_name}: no file name returned")
        return remote

    def get_state(self, name: str) -> FileState:
        """
        Fetch the current processing state of a remote file.

        Raises:
            TransportError: On network or HTTP failure
        """
        with translate_google_errors(f"status check of {name}"):
            remote = self.client.files.get(name=name)
        return FileState.from_remote(getattr(remote, "state", None))

    def delete(self, name: str) -> None:
        """
        Delete a remote file.

        Raises:
            TransportError: On network or HTTP failure
        """
        with translate_google_errors(f"delete of {name}"):
            self.client.files.delete(name=name)

    def generate_with_files(
        self,
        prompt: str,
        handles: List[UploadedFileHandle],
        system_instruction: Optional[str] = None,
    ) -> LLMResponse:
        """
        Generate text from a prompt plus ACTIVE file references.

        File parts follow the prompt text in the order given.

        Raises:
            TransportError: On network or HTTP failure
        """
        parts: List[Dict[str, Any]] = [{"text": prompt}]
        for handle in handles:
            parts.append({
                "file_data": {"file_uri": handle.uri, "mime_type": handle.content_type},
            })

        # Only 'user' and 'model' roles are accepted; the system instruction
        # travels in the generation config
        contents = [{"role": "user", "parts": parts}]

        usage: Dict[str, Any] = {}
        with translate_google_errors("generate"):
            chunks = self.client.models.generate_content_stream(
                model=self.config.model,
                contents=contents,
                config=build_generation_config(self.config, system_instruction),
            )
            content = "".join(drain_chunks(chunks, usage))

        return LLMResponse(
            content=content,
            input_tokens=int_or_none(usage.get("input_tokens")),
            output_tokens=int_or_none(usage.get("output_tokens")),
            model_id=self.config.model,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model_id})"


def _to_remote_file(uploaded: Any, fallback_content_type: str) -> RemoteFile:
    name = getattr(uploaded, "name", None)
    uri = getattr(uploaded, "uri", None)
    content_type = getattr(uploaded, "mime_type", None)
    return RemoteFile(
        name=name if isinstance(name, str) else "",
        uri=uri if isinstance(uri, str) else "",
        content_type=content_type if isinstance(content_type, str) else (fallback_content_type or DEFAULT_CONTENT_TYPE),
        state=FileState.from_remote(getattr(uploaded, "state", None)),
    )
