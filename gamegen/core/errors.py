"""
Error taxonomy for the generation pipeline.

Every failure raised inside the pipeline is a GenerationError subclass
with a stable ``kind`` name. The orchestrator converts these into a
failed GenerationResult; nothing below it returns error values.
"""

from typing import Optional


class GenerationError(Exception):
    """Base class for all pipeline failures."""
    kind = "GenerationError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(GenerationError):
    """Request failed validation (empty project name, no documents, ...)."""
    kind = "InvalidRequest"


class MissingCredentialError(GenerationError):
    """A provider was constructed without a usable credential."""
    kind = "MissingCredential"

    def __init__(self, provider: str, hint: Optional[str] = None):
        message = f"No credential configured for provider '{provider}'"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)
        self.provider = provider


class AnchorNotFoundError(GenerationError):
    """No marker file was found walking upward from the output directory."""
    kind = "AnchorNotFound"

    def __init__(self, start: str, marker: str, max_levels: int):
        super().__init__(
            f"Could not find {marker} file. Searched {max_levels} levels up from: {start}. "
            f"Please create a {marker} file with GEMINI_API_KEY=your_key in your project root directory."
        )
        self.start = start
        self.marker = marker


class TransportError(GenerationError):
    """Network or HTTP failure talking to a provider."""
    kind = "TransportError"


class UploadFailedError(GenerationError):
    """Remote storage rejected a file or reported it FAILED."""
    kind = "UploadFailed"


class UploadTimeoutError(GenerationError):
    """A remote file did not become ACTIVE within the polling timeout."""
    kind = "UploadTimeout"


class WriteFailedError(GenerationError):
    """The artifact could not be written to disk."""
    kind = "WriteFailed"


class DocumentReadError(GenerationError):
    """An input document could not be read."""
    kind = "DocumentReadError"


class StagingError(GenerationError):
    """An input document could not be copied into the staging area."""
    kind = "StagingError"


class GenerationCancelled(GenerationError):
    """The caller cancelled the request mid-protocol."""
    kind = "Cancelled"

    def __init__(self, stage: str):
        super().__init__(f"Generation cancelled during {stage}")
        self.stage = stage
