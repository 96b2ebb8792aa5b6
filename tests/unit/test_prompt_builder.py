"""Unit tests for the prompt builder."""

import pytest
from pathlib import Path

from gamegen.models import (
    DocumentRole,
    TaskKind,
    PromptDocument,
    InputDocument,
    UploadedFileHandle,
    FileState,
)
from gamegen.prompts import (
    build_prompt,
    inline_documents,
    attachment_documents,
    SPEC_SYSTEM_INSTRUCTION,
    IMPLEMENTATION_SYSTEM_INSTRUCTION,
)


@pytest.fixture
def spec_documents():
    return [
        PromptDocument(DocumentRole.SOURCE, "chapter2.md", "Second chapter"),
        PromptDocument(DocumentRole.GUIDELINE, "rubric.md", "Be playful"),
        PromptDocument(DocumentRole.SOURCE, "chapter1.md", "First chapter"),
    ]


class TestSpecificationPrompt:
    """Tests for specification prompts."""

    def test_is_deterministic(self, spec_documents):
        first = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        second = build_prompt(list(spec_documents), TaskKind.SPEC_GENERATION, "myproj")
        assert first == second
        assert first.prompt.encode("utf-8") == second.prompt.encode("utf-8")

    def test_mentions_project(self, spec_documents):
        prompt, _ = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        assert 'for the project "myproj"' in prompt

    def test_groups_sources_before_guidelines(self, spec_documents):
        prompt, _ = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        assert prompt.index("# Source Documents") < prompt.index("# Prompting/Guideline Documents")
        assert prompt.index("### Source Document: chapter1.md") < prompt.index("# Prompting/Guideline Documents")
        assert prompt.index("### Prompting Document: rubric.md") > prompt.index("# Prompting/Guideline Documents")

    def test_keeps_input_order_within_group(self, spec_documents):
        prompt, _ = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        assert prompt.index("chapter2.md") < prompt.index("chapter1.md")

    def test_documents_are_separated(self, spec_documents):
        prompt, _ = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        assert "Second chapter\n\n---\n\n### Source Document: chapter1.md" in prompt

    def test_task_suffix_lists_sections(self, spec_documents):
        prompt, _ = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        for section in (
            "Game Overview",
            "Game Mechanics",
            "Content Integration",
            "Player Experience",
            "Technical Requirements",
            "Success Criteria",
        ):
            assert section in prompt
        assert prompt.endswith("Please provide a complete, well-structured game specification document.")

    def test_system_instruction(self, spec_documents):
        _, system_instruction = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        assert system_instruction == SPEC_SYSTEM_INSTRUCTION

    def test_empty_guideline_group(self):
        documents = [PromptDocument(DocumentRole.SOURCE, "a.md", "A")]
        prompt, _ = build_prompt(documents, TaskKind.SPEC_GENERATION, "p")
        assert "(none provided)" in prompt

    def test_order_changes_output(self, spec_documents):
        reordered = [spec_documents[2], spec_documents[1], spec_documents[0]]
        first = build_prompt(spec_documents, TaskKind.SPEC_GENERATION, "myproj")
        second = build_prompt(reordered, TaskKind.SPEC_GENERATION, "myproj")
        assert first.prompt != second.prompt


class TestImplementationPrompt:
    """Tests for implementation prompts."""

    def test_renders_specifications(self):
        documents = [PromptDocument(DocumentRole.SPECIFICATION, "spec.md", "The game")]
        prompt, system_instruction = build_prompt(documents, TaskKind.IMPLEMENTATION_GENERATION, "p")

        assert "implementing a SOLUZION game" in prompt
        assert "### Game Specification: spec.md\n\nThe game" in prompt
        assert "README with setup and usage instructions" in prompt
        assert "# Source Documents" not in prompt
        assert system_instruction == IMPLEMENTATION_SYSTEM_INSTRUCTION


class TestAttachedPrompt:
    """Tests for prompts that reference uploaded files."""

    @pytest.fixture
    def documents(self):
        return [
            InputDocument.from_path("a.md", DocumentRole.SOURCE),
            InputDocument.from_path("b.pdf", DocumentRole.GUIDELINE),
        ]

    @pytest.fixture
    def handles(self):
        return [
            UploadedFileHandle("files/1", "uri://1", "text/markdown", "a.md", Path("s/001-a.md"), FileState.ACTIVE),
            UploadedFileHandle("files/2", "uri://2", "application/pdf", "b.pdf", Path("s/002-b.pdf"), FileState.ACTIVE),
        ]

    def test_attachment_documents(self, documents, handles):
        blocks = attachment_documents(documents, handles)
        assert [b.name for b in blocks] == ["a.md", "b.pdf"]
        assert "attached file 2 of 2" in blocks[1].content
        assert "application/pdf" in blocks[1].content

    def test_attachment_documents_length_mismatch(self, documents, handles):
        with pytest.raises(ValueError):
            attachment_documents(documents, handles[:1])

    def test_attached_prompt_summarizes_uploads(self, documents, handles):
        blocks = attachment_documents(documents, handles)
        prompt, _ = build_prompt(blocks, TaskKind.SPEC_GENERATION, "p", attached=True)
        assert "The files uploaded include:" in prompt
        assert "- Source Documents (1 files)" in prompt
        assert "- Prompting/Guideline Documents (1 files)" in prompt

    def test_attached_prompt_is_deterministic(self, documents, handles):
        blocks = attachment_documents(documents, handles)
        assert build_prompt(blocks, TaskKind.SPEC_GENERATION, "p", attached=True) == \
            build_prompt(blocks, TaskKind.SPEC_GENERATION, "p", attached=True)


class TestInlineDocuments:
    """Tests for reading documents into prompt blocks."""

    def test_reads_content(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("# Notes", encoding="utf-8")
        blocks = inline_documents([InputDocument.from_path(path, DocumentRole.SOURCE)])
        assert blocks == [PromptDocument(DocumentRole.SOURCE, "notes.md", "# Notes")]
