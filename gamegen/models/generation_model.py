"""
Generation Data Models - Structured representation of one generation call.

These models flow between the orchestrator, the prompt builder, the
upload lifecycle and the artifact writer. Requests and results are
immutable; upload handles are mutable only while the upload manager
owns them.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Tuple, Iterable
from pathlib import Path
from enum import Enum
import mimetypes
import time

from ..core.errors import InvalidRequestError, DocumentReadError


DEFAULT_CONTENT_TYPE = "application/octet-stream"


class DocumentRole(Enum):
    """Role an input document plays in the prompt."""
    SOURCE = "source"                # Content the game is built from
    GUIDELINE = "guideline"          # Prompting/guideline documents
    SPECIFICATION = "specification"  # Game specifications to implement

    @property
    def label(self) -> str:
        """Heading label used when the document is rendered into a prompt."""
        return _ROLE_LABELS[self]

    @classmethod
    def from_string(cls, value: str) -> 'DocumentRole':
        """Parse a role from string, handling common variations."""
        value_lower = value.lower().strip()
        if value_lower in ('source', 'sources', 'content'):
            return cls.SOURCE
        elif value_lower in ('guideline', 'guidelines', 'prompting', 'prompt'):
            return cls.GUIDELINE
        elif value_lower in ('specification', 'specifications', 'spec', 'specs'):
            return cls.SPECIFICATION
        raise ValueError(f"Unknown document role: {value}")


_ROLE_LABELS = {
    DocumentRole.SOURCE: "Source Document",
    DocumentRole.GUIDELINE: "Prompting Document",
    DocumentRole.SPECIFICATION: "Game Specification",
}


class TaskKind(Enum):
    """What the generation call produces."""
    SPEC_GENERATION = "spec_generation"
    IMPLEMENTATION_GENERATION = "implementation_generation"

    @property
    def artifact_tag(self) -> str:
        """Tag embedded in the artifact filename."""
        return "spec" if self is TaskKind.SPEC_GENERATION else "game"

    @property
    def extension(self) -> str:
        """Artifact file extension, including the dot."""
        return ".md" if self is TaskKind.SPEC_GENERATION else ".txt"

    @property
    def accepted_roles(self) -> Tuple[DocumentRole, ...]:
        """Document roles a request of this kind may contain."""
        if self is TaskKind.SPEC_GENERATION:
            return (DocumentRole.SOURCE, DocumentRole.GUIDELINE)
        return (DocumentRole.SPECIFICATION,)


@dataclass(frozen=True)
class InputDocument:
    """A local document selected as generation input."""
    path: Path
    display_name: str
    content_type: str
    role: DocumentRole

    @classmethod
    def from_path(cls, path: Path | str, role: DocumentRole) -> 'InputDocument':
        """
        Describe a local file as an input document.

        Args:
            path: Path to the file
            role: Role of the document in the prompt

        Returns:
            InputDocument with display name and detected content type
        """
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            path=path,
            display_name=path.name,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            role=role,
        )

    def read_text(self) -> str:
        """
        Read the document as UTF-8 text.

        Raises:
            DocumentReadError: If the file cannot be read
        """
        try:
            return self.path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise DocumentReadError(f"Cannot read {self.path}: {e}") from e


@dataclass(frozen=True)
class GenerationRequest:
    """
    Everything one generation call needs, fixed at construction time.

    Documents keep their input order; that order is the order they are
    rendered in the prompt and attached to the provider call.
    """
    documents: Tuple[InputDocument, ...]
    task_kind: TaskKind
    project_name: str
    output_directory: Path

    def __post_init__(self):
        object.__setattr__(self, 'documents', tuple(self.documents))
        object.__setattr__(self, 'output_directory', Path(self.output_directory))

        if not self.project_name or not self.project_name.strip():
            raise InvalidRequestError("Project name must not be empty")
        if not self.documents:
            raise InvalidRequestError("At least one input document is required")

        accepted = self.task_kind.accepted_roles
        for document in self.documents:
            if document.role not in accepted:
                raise InvalidRequestError(
                    f"{document.display_name}: role '{document.role.value}' "
                    f"is not valid for {self.task_kind.value}"
                )

    @classmethod
    def for_specification(
        cls,
        source_documents: Iterable[Path | str],
        guideline_documents: Iterable[Path | str],
        output_directory: Path | str,
        project_name: str,
    ) -> 'GenerationRequest':
        """Build a specification request; sources precede guidelines."""
        documents = [InputDocument.from_path(p, DocumentRole.SOURCE) for p in source_documents]
        documents += [InputDocument.from_path(p, DocumentRole.GUIDELINE) for p in guideline_documents]
        return cls(
            documents=tuple(documents),
            task_kind=TaskKind.SPEC_GENERATION,
            project_name=project_name,
            output_directory=Path(output_directory),
        )

    @classmethod
    def for_implementation(
        cls,
        specification_documents: Iterable[Path | str],
        output_directory: Path | str,
        project_name: str,
    ) -> 'GenerationRequest':
        """Build an implementation request from specification documents."""
        documents = [
            InputDocument.from_path(p, DocumentRole.SPECIFICATION)
            for p in specification_documents
        ]
        return cls(
            documents=tuple(documents),
            task_kind=TaskKind.IMPLEMENTATION_GENERATION,
            project_name=project_name,
            output_directory=Path(output_directory),
        )

    def documents_with_role(self, role: DocumentRole) -> List[InputDocument]:
        """Documents of one role, in input order."""
        return [d for d in self.documents if d.role is role]


class FileState(Enum):
    """Readiness of a file in remote storage."""
    PENDING = "pending"
    ACTIVE = "active"
    FAILED = "failed"

    @classmethod
    def from_remote(cls, value: Any) -> 'FileState':
        """
        Map a provider-reported state onto FileState.

        Accepts enum members (uses their name) or plain strings.
        Anything that is not ACTIVE or FAILED is still processing.
        """
        if value is None:
            return cls.PENDING
        name = getattr(value, 'name', value)
        name = str(name).upper()
        if name == "ACTIVE":
            return cls.ACTIVE
        if name == "FAILED":
            return cls.FAILED
        return cls.PENDING


@dataclass
class UploadedFileHandle:
    """A file materialized in remote storage for one generation call."""
    name: str                   # Remote identity, used for get/delete
    uri: str                    # Reference passed to the model
    content_type: str
    display_name: str
    staged_path: Path
    state: FileState = FileState.PENDING
    created_at: float = field(default_factory=time.monotonic)

    @property
    def is_active(self) -> bool:
        return self.state is FileState.ACTIVE


@dataclass(frozen=True)
class PromptDocument:
    """A labeled block of text rendered into a prompt."""
    role: DocumentRole
    name: str
    content: str

    @property
    def header(self) -> str:
        return f"### {self.role.label}: {self.name}"

    def render(self) -> str:
        return f"{self.header}\n\n{self.content}"


@dataclass(frozen=True)
class GenerationResult:
    """
    Terminal outcome of one generation call.

    Exactly one of ``output_path`` (success) or ``error`` (failure) is set.
    Use ``ok`` and ``failed`` to build instances.
    """
    success: bool
    output_path: Optional[Path] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    # Provenance, for the caller's project history
    provider: Optional[str] = None
    model: Optional[str] = None
    inputs: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.success and (self.output_path is None or self.error is not None):
            raise ValueError("Successful result requires output_path and no error")
        if not self.success and (self.error is None or self.output_path is not None):
            raise ValueError("Failed result requires error and no output_path")

    @classmethod
    def ok(
        cls,
        output_path: Path,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        inputs: Iterable[str] = (),
    ) -> 'GenerationResult':
        """Create a success result."""
        return cls(
            success=True,
            output_path=Path(output_path),
            provider=provider,
            model=model,
            inputs=tuple(inputs),
        )

    @classmethod
    def failed(
        cls,
        error: str,
        error_kind: Optional[str] = None,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        inputs: Iterable[str] = (),
    ) -> 'GenerationResult':
        """Create a failure result."""
        return cls(
            success=False,
            error=error or "Unknown error",
            error_kind=error_kind,
            provider=provider,
            model=model,
            inputs=tuple(inputs),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to JSON-serializable dict."""
        return {
            "success": self.success,
            "output_path": str(self.output_path) if self.output_path else None,
            "error": self.error,
            "error_kind": self.error_kind,
            "provider": self.provider,
            "model": self.model,
            "inputs": list(self.inputs),
        }
