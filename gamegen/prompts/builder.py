"""
Prompt Builder - Render documents into a generation prompt.

Pure functions: the same documents, order, task kind and project name
always produce byte-identical output. Documents are rendered in the order
given; they are grouped by role but never re-sorted within a group.
"""

from typing import List, NamedTuple, Optional, Sequence, Tuple

from ..models import (
    DocumentRole,
    TaskKind,
    PromptDocument,
    UploadedFileHandle,
    InputDocument,
)


DOCUMENT_SEPARATOR = "\n\n---\n\n"

SPEC_SYSTEM_INSTRUCTION = (
    "You are an expert game designer specializing in educational gamification. "
    "You create engaging, pedagogically sound game specifications that transform "
    "academic content into interactive learning experiences."
)

IMPLEMENTATION_SYSTEM_INSTRUCTION = (
    "You are an expert SOLUZION game developer. You create complete, functional game "
    "implementations based on specifications, with clean code and clear documentation."
)

SPEC_TASK = """# Task

Based on the source documents and following the guidelines in the prompting documents, create a detailed game specification in Markdown format. The specification should include:

1. **Game Overview**: Summary of the game concept and learning objectives
2. **Game Mechanics**: Detailed description of how the game works
3. **Content Integration**: How source document content is integrated into gameplay
4. **Player Experience**: Expected player interactions and progression
5. **Technical Requirements**: Any technical specifications needed for implementation
6. **Success Criteria**: How to measure if the game achieves its objectives

Please provide a complete, well-structured game specification document."""

IMPLEMENTATION_TASK = """# Task

Based on the game specification(s), create a complete SOLUZION game implementation.

Please provide all necessary files for a working SOLUZION game, including:
1. Main game logic files
2. Content/data files
3. Configuration files
4. Any supporting assets or resources
5. README with setup and usage instructions

Format your response as a structured set of files that can be packaged into a zip archive."""

_GROUP_INTROS = {
    DocumentRole.SOURCE: (
        "Source Documents",
        "The following source documents provide the context and content for the game:",
        "These provide the context and content for the game",
    ),
    DocumentRole.GUIDELINE: (
        "Prompting/Guideline Documents",
        "The following documents provide guidelines and instructions for creating the game specification:",
        "These provide guidelines and instructions",
    ),
    DocumentRole.SPECIFICATION: (
        "Game Specifications",
        "The following game specification(s) describe the game to be implemented:",
        "These describe the game to be implemented",
    ),
}

EMPTY_GROUP = "(none provided)"


class BuiltPrompt(NamedTuple):
    """Prompt text plus the optional system instruction."""
    prompt: str
    system_instruction: Optional[str]


def build_prompt(
    documents: Sequence[PromptDocument],
    task_kind: TaskKind,
    project_name: str,
    attached: bool = False,
) -> BuiltPrompt:
    """
    Render a prompt for the given task.

    For specification generation the documents are split into source and
    guideline groups; for implementation generation every document is a
    specification. When ``attached`` is true the documents carry
    attachment notes rather than content and the prompt says so.

    Args:
        documents: Labeled documents in input order
        task_kind: What to generate
        project_name: Project the artifact is for
        attached: Whether document content travels as uploaded files

    Returns:
        BuiltPrompt(prompt, system_instruction)
    """
    groups = task_kind.accepted_roles
    parts = [_opening(task_kind, project_name)]

    if attached:
        parts.append(_attachment_summary(documents, groups))

    for role in groups:
        title, description, _ = _GROUP_INTROS[role]
        members = [d for d in documents if d.role is role]
        rendered = DOCUMENT_SEPARATOR.join(d.render() for d in members) or EMPTY_GROUP
        parts.append(f"# {title}\n\n{description}\n\n{rendered}")

    parts.append(SPEC_TASK if task_kind is TaskKind.SPEC_GENERATION else IMPLEMENTATION_TASK)

    system_instruction = (
        SPEC_SYSTEM_INSTRUCTION
        if task_kind is TaskKind.SPEC_GENERATION
        else IMPLEMENTATION_SYSTEM_INSTRUCTION
    )
    return BuiltPrompt("\n\n".join(parts), system_instruction)


def inline_documents(documents: Sequence[InputDocument]) -> List[PromptDocument]:
    """
    Read input documents into prompt blocks carrying their full text.

    Raises:
        DocumentReadError: If a document cannot be read
    """
    return [
        PromptDocument(role=d.role, name=d.display_name, content=d.read_text())
        for d in documents
    ]


def attachment_documents(
    documents: Sequence[InputDocument],
    handles: Sequence[UploadedFileHandle],
) -> List[PromptDocument]:
    """
    Prompt blocks that point at uploaded files instead of inlining them.

    ``handles`` must be in the same order as ``documents``.
    """
    if len(documents) != len(handles):
        raise ValueError(f"Expected {len(documents)} handles, got {len(handles)}")

    total = len(documents)
    return [
        PromptDocument(
            role=document.role,
            name=document.display_name,
            content=f"Provided as attached file {index} of {total} ({handle.content_type}).",
        )
        for index, (document, handle) in enumerate(zip(documents, handles), start=1)
    ]


def _opening(task_kind: TaskKind, project_name: str) -> str:
    if task_kind is TaskKind.SPEC_GENERATION:
        return f'You are tasked with creating a game specification for the project "{project_name}".'
    return f'You are tasked with implementing a SOLUZION game for the project "{project_name}".'


def _attachment_summary(
    documents: Sequence[PromptDocument],
    groups: Tuple[DocumentRole, ...],
) -> str:
    lines = ["The files uploaded include:"]
    for role in groups:
        title, _, purpose = _GROUP_INTROS[role]
        count = sum(1 for d in documents if d.role is role)
        lines.append(f"- {title} ({count} files): {purpose}")
    return "\n".join(lines)
