"""
Generation Orchestrator - Top-level entry points for artifact generation.

Selects the provider, builds the prompt, delegates to a direct client or
to the upload lifecycle, writes the artifact and returns a
GenerationResult. This is the error boundary of the package: every
failure below it becomes a failed result, nothing propagates.
"""

import threading
from pathlib import Path
from typing import Callable, Iterable, Optional

from ..core.config import AppConfig, ProviderConfig
from ..core.context import RequestContext, GenerationPhase
from ..core.errors import GenerationError
from ..llm import create_client, create_files_client
from ..llm.base import BaseLLMClient, LLMResponse
from ..models import GenerationRequest, GenerationResult
from ..output import ArtifactWriter
from ..prompts import build_prompt, inline_documents, attachment_documents
from ..uploads import (
    UploadLifecycleManager,
    FilesClient,
    find_anchor_directory,
    load_anchor_credential,
)
from ..utils.logger import get_logger, LogContext, log_exception

logger = get_logger(__name__)

ClientFactory = Callable[[ProviderConfig], BaseLLMClient]
FilesClientFactory = Callable[[ProviderConfig, Optional[str]], FilesClient]


class GenerationOrchestrator:
    """
    Runs generation requests end to end.

    The orchestrator holds only configuration and factories; clients,
    handles and staging folders are created per call, so one instance can
    serve concurrent calls.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        client_factory: ClientFactory = create_client,
        files_client_factory: FilesClientFactory = create_files_client,
        writer: Optional[ArtifactWriter] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Application configuration
            client_factory: Builds a direct-text client for a provider config
            files_client_factory: Builds the Files API client from a provider
                config and a credential
            writer: Artifact writer
        """
        self.config = config or AppConfig()
        self.client_factory = client_factory
        self.files_client_factory = files_client_factory
        self.writer = writer or ArtifactWriter()

    def generate_specification(
        self,
        source_documents: Iterable[Path | str],
        guideline_documents: Iterable[Path | str],
        output_directory: Path | str,
        project_name: str,
        provider_config: Optional[ProviderConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationResult:
        """
        Generate a game specification from source and guideline documents.

        Returns:
            GenerationResult; never raises
        """
        provider_config = provider_config or self.config.provider
        try:
            request = GenerationRequest.for_specification(
                source_documents, guideline_documents, output_directory, project_name,
            )
        except GenerationError as e:
            return self._failure(e, provider_config)
        except Exception as e:
            return self._unexpected(e, provider_config)
        return self.generate(request, provider_config, cancel_event)

    def implement_artifact(
        self,
        specification_documents: Iterable[Path | str],
        output_directory: Path | str,
        project_name: str,
        provider_config: Optional[ProviderConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationResult:
        """
        Generate a game implementation from specification documents.

        Returns:
            GenerationResult; never raises
        """
        provider_config = provider_config or self.config.provider
        try:
            request = GenerationRequest.for_implementation(
                specification_documents, output_directory, project_name,
            )
        except GenerationError as e:
            return self._failure(e, provider_config)
        except Exception as e:
            return self._unexpected(e, provider_config)
        return self.generate(request, provider_config, cancel_event)

    def generate(
        self,
        request: GenerationRequest,
        provider_config: Optional[ProviderConfig] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationResult:
        """
        Run one generation request.

        Args:
            request: What to generate
            provider_config: Provider to use (defaults to the configured one)
            cancel_event: Set it to abort the call; cleanup still runs

        Returns:
            GenerationResult; never raises
        """
        provider_config = provider_config or self.config.provider
        context = RequestContext(cancel_event=cancel_event)
        inputs = [str(d.path) for d in request.documents]

        try:
            with LogContext(
                logger,
                f"Generating {request.task_kind.artifact_tag}",
                project=request.project_name,
                provider=provider_config.describe(),
                request=context.request_id,
            ) as operation:
                if provider_config.provider.uses_file_uploads:
                    response = self._generate_with_uploads(request, provider_config, context)
                else:
                    response = self._generate_direct(request, provider_config, context)

                context.record_usage(response.input_tokens, response.output_tokens)
                if response.is_empty:
                    # TODO: confirm with product whether empty answers (e.g. safety blocks) should fail
                    context.add_warning("Provider returned an empty response; writing it as-is")

                context.enter_phase(GenerationPhase.WRITING)
                output_path = self.writer.write(
                    request.output_directory,
                    request.project_name,
                    request.task_kind,
                    response.content,
                )
                operation.add(output=output_path.name, tokens=response.total_tokens)

            context.enter_phase(GenerationPhase.COMPLETE)
            logger.debug(f"[{context.request_id}] stats: {context.stats}")
            return GenerationResult.ok(
                output_path,
                provider=provider_config.provider.value,
                model=provider_config.model,
                inputs=inputs,
            )

        except GenerationError as e:
            context.enter_phase(GenerationPhase.FAILED)
            return self._failure(e, provider_config, inputs)
        except Exception as e:
            context.enter_phase(GenerationPhase.FAILED)
            return self._unexpected(e, provider_config, inputs)

    def _generate_direct(
        self,
        request: GenerationRequest,
        provider_config: ProviderConfig,
        context: RequestContext,
    ) -> LLMResponse:
        context.enter_phase(GenerationPhase.RESOLVING)
        client = self.client_factory(provider_config)

        context.enter_phase(GenerationPhase.PROMPTING)
        documents = inline_documents(request.documents)
        prompt, system_instruction = build_prompt(
            documents, request.task_kind, request.project_name,
        )

        context.enter_phase(GenerationPhase.GENERATING)
        return client.send_text(prompt, system_instruction)

    def _generate_with_uploads(
        self,
        request: GenerationRequest,
        provider_config: ProviderConfig,
        context: RequestContext,
    ) -> LLMResponse:
        uploads = self.config.uploads

        context.enter_phase(GenerationPhase.RESOLVING)
        anchor = find_anchor_directory(
            request.output_directory, uploads.marker_file, uploads.max_anchor_levels,
        )
        credential = provider_config.credential or load_anchor_credential(
            anchor, uploads.marker_file, uploads.key_names,
        )
        files_client = self.files_client_factory(provider_config, credential)

        manager = UploadLifecycleManager(files_client, uploads, context)
        with manager.upload_batch(request.documents, anchor, request.project_name) as handles:
            context.enter_phase(GenerationPhase.PROMPTING)
            documents = attachment_documents(request.documents, handles)
            prompt, system_instruction = build_prompt(
                documents, request.task_kind, request.project_name, attached=True,
            )

            context.enter_phase(GenerationPhase.GENERATING)
            logger.info("Generating from uploaded files...")
            return files_client.generate_with_files(prompt, handles, system_instruction)

    def _failure(
        self,
        error: GenerationError,
        provider_config: ProviderConfig,
        inputs: Iterable[str] = (),
    ) -> GenerationResult:
        logger.error(f"Generation failed [{error.kind}]: {error.message}")
        return GenerationResult.failed(
            error.message,
            error_kind=error.kind,
            provider=provider_config.provider.value,
            model=provider_config.model,
            inputs=inputs,
        )

    def _unexpected(
        self,
        error: Exception,
        provider_config: ProviderConfig,
        inputs: Iterable[str] = (),
    ) -> GenerationResult:
        log_exception(logger, "Unexpected generation failure", error)
        return GenerationResult.failed(
            f"{type(error).__name__}: {error}",
            error_kind="Unexpected",
            provider=provider_config.provider.value,
            model=provider_config.model,
            inputs=inputs,
        )


def generate_specification(
    source_documents: Iterable[Path | str],
    guideline_documents: Iterable[Path | str],
    output_directory: Path | str,
    project_name: str,
    provider_config: Optional[ProviderConfig] = None,
    config: Optional[AppConfig] = None,
) -> GenerationResult:
    """Convenience wrapper around GenerationOrchestrator.generate_specification."""
    return GenerationOrchestrator(config).generate_specification(
        source_documents, guideline_documents, output_directory, project_name, provider_config,
    )


def implement_artifact(
    specification_documents: Iterable[Path | str],
    output_directory: Path | str,
    project_name: str,
    provider_config: Optional[ProviderConfig] = None,
    config: Optional[AppConfig] = None,
) -> GenerationResult:
    """Convenience wrapper around GenerationOrchestrator.implement_artifact."""
    return GenerationOrchestrator(config).implement_artifact(
        specification_documents, output_directory, project_name, provider_config,
    )
