"""
CLI - Command-line interface for artifact generation.

Main entry point for the application. Orchestrates:
1. Environment and configuration loading
2. Provider selection
3. Specification or implementation generation
4. Reporting the artifact path or the error
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from .core.config import AppConfig, ProviderConfig, ProviderKind, load_config
from .generator import GenerationOrchestrator
from .llm import MockLLMClient, MockFilesClient
from .models import GenerationResult, TaskKind
from .utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="gamegen",
        description="Generate game specifications and implementations from documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s spec --source chapter1.pdf --guideline rubric.md -o out -n myproj
  %(prog)s implement --spec out/myproj-spec-2026-01-01T10-00-00.md -o out -n myproj
  %(prog)s spec --source notes.md -o out -n demo --provider google_files
        """,
    )

    # Shared options live on each subcommand so they may follow it
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-o", "--output-dir",
        type=Path,
        required=True,
        help="Directory the artifact is written to (created if absent)",
    )
    common.add_argument(
        "-n", "--project",
        required=True,
        help="Project name, used in the artifact file name",
    )
    common.add_argument(
        "-p", "--provider",
        choices=[kind.value for kind in ProviderKind],
        help="Generation provider (default: from config)",
    )
    common.add_argument(
        "-m", "--model",
        help="Model name (default: provider default)",
    )
    common.add_argument(
        "-c", "--config",
        type=Path,
        help="Configuration file (YAML)",
    )
    common.add_argument(
        "--mock-llm",
        action="store_true",
        help="Use mock clients (no API calls)",
    )
    common.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    common.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    spec = subparsers.add_parser(
        "spec",
        parents=[common],
        help="Generate a game specification",
    )
    spec.add_argument(
        "-s", "--source",
        type=Path,
        action="append",
        default=[],
        required=True,
        help="Source document (repeatable)",
    )
    spec.add_argument(
        "-g", "--guideline",
        type=Path,
        action="append",
        default=[],
        help="Prompting/guideline document (repeatable)",
    )

    implement = subparsers.add_parser(
        "implement",
        parents=[common],
        help="Generate a game implementation from specifications",
    )
    implement.add_argument(
        "--spec",
        type=Path,
        action="append",
        default=[],
        required=True,
        dest="specification",
        help="Game specification document (repeatable)",
    )

    return parser.parse_args(argv)


def build_orchestrator(config: AppConfig, use_mock_llm: bool = False) -> GenerationOrchestrator:
    """
    Create an orchestrator, optionally wired to mock clients.

    Args:
        config: Application configuration
        use_mock_llm: Replace every provider with an offline mock
    """
    if not use_mock_llm:
        return GenerationOrchestrator(config)

    return GenerationOrchestrator(
        config,
        client_factory=lambda provider_config: MockLLMClient(provider_config),
        files_client_factory=lambda provider_config, credential: MockFilesClient(provider_config),
    )


def _provider_config(config: AppConfig, args: argparse.Namespace) -> ProviderConfig:
    base = config.provider
    if not args.provider and not args.model:
        return base

    provider = ProviderKind(args.provider) if args.provider else base.provider
    same_provider = provider is base.provider
    return ProviderConfig(
        provider=provider,
        model=args.model or (base.model if same_provider else None),
        credential=base.credential if same_provider else None,
        temperature=base.temperature,
        max_tokens=base.max_tokens if same_provider else None,
        timeout=base.timeout,
        max_retries=base.max_retries,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_args(argv)

    # Pick up API keys from ./.env before the config reads the environment
    load_dotenv()

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    log_level = "DEBUG" if args.verbose else config.logging.level
    setup_logging(level=log_level, format_string=config.logging.format, log_file=config.logging.file)

    provider_config = _provider_config(config, args)
    if args.mock_llm and provider_config.credential is None:
        provider_config.credential = "mock"

    orchestrator = build_orchestrator(config, args.mock_llm)
    logger.info(f"Provider: {provider_config.describe()}")

    if args.command == "spec":
        result = orchestrator.generate_specification(
            args.source, args.guideline, args.output_dir, args.project, provider_config,
        )
    else:
        result = orchestrator.implement_artifact(
            args.specification, args.output_dir, args.project, provider_config,
        )

    _report(result, args.json)
    return 0 if result.success else 1


def _report(result: GenerationResult, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.success:
        print(result.output_path)
    else:
        print(f"Error ({result.error_kind}): {result.error}", file=sys.stderr)


def run_generation(
    task_kind: TaskKind | str,
    documents: Sequence[Path | str],
    output_directory: Path | str,
    project_name: str,
    guideline_documents: Sequence[Path | str] = (),
    config: Optional[AppConfig] = None,
    use_mock_llm: bool = False,
) -> GenerationResult:
    """
    Programmatic interface mirroring the CLI.

    Args:
        task_kind: TaskKind or its value
        documents: Source documents (specification) or specifications
            (implementation)
        output_directory: Where the artifact is written
        project_name: Project name
        guideline_documents: Guideline documents (specification only)
        config: Optional configuration
        use_mock_llm: Use mock clients

    Returns:
        GenerationResult
    """
    config = config or AppConfig()
    if isinstance(task_kind, str):
        task_kind = TaskKind(task_kind)

    orchestrator = build_orchestrator(config, use_mock_llm)
    if task_kind is TaskKind.SPEC_GENERATION:
        return orchestrator.generate_specification(
            list(documents), list(guideline_documents), output_directory, project_name,
        )
    return orchestrator.implement_artifact(list(documents), output_directory, project_name)


if __name__ == "__main__":
    sys.exit(main())
