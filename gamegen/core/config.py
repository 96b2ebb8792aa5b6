"""
Configuration management for the artifact generator.

Provides dataclasses for all configuration options with sensible defaults,
YAML file loading, and environment fallbacks for credentials.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple
from pathlib import Path
from enum import Enum
import os
import yaml


class ProviderKind(Enum):
    """Supported generation providers."""
    ANTHROPIC = "anthropic"        # Direct text call
    GOOGLE = "google"              # Direct text call
    OPENAI = "openai"              # Direct text call
    GOOGLE_FILES = "google_files"  # Upload, wait for ACTIVE, generate, delete
    MOCK = "mock"                  # For testing

    @property
    def uses_file_uploads(self) -> bool:
        return self is ProviderKind.GOOGLE_FILES

    @classmethod
    def from_string(cls, value: str) -> 'ProviderKind':
        """Parse provider from string, handling common variations."""
        value_lower = value.lower().strip().replace("-", "_")
        aliases = {
            'claude': cls.ANTHROPIC,
            'gemini': cls.GOOGLE,
            'gpt': cls.OPENAI,
            'gemini_files': cls.GOOGLE_FILES,
            'files': cls.GOOGLE_FILES,
        }
        if value_lower in aliases:
            return aliases[value_lower]
        return cls(value_lower)


DEFAULT_MODELS = {
    ProviderKind.ANTHROPIC: "claude-sonnet-4-20250514",
    ProviderKind.GOOGLE: "gemini-2.5-flash",
    ProviderKind.OPENAI: "gpt-4o",
    ProviderKind.GOOGLE_FILES: "gemini-2.5-flash",
    ProviderKind.MOCK: "mock-model",
}

# Output token ceilings per provider family
DEFAULT_MAX_TOKENS = {
    ProviderKind.ANTHROPIC: 64000,
    ProviderKind.GOOGLE: 65536,
    ProviderKind.OPENAI: 16384,
    ProviderKind.GOOGLE_FILES: 65536,
    ProviderKind.MOCK: 64000,
}

# Environment variables consulted when no credential is configured
CREDENTIAL_ENV_VARS = {
    ProviderKind.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    ProviderKind.GOOGLE: ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    ProviderKind.OPENAI: ("OPENAI_API_KEY",),
    ProviderKind.GOOGLE_FILES: (),  # Read from the anchor .env file instead
    ProviderKind.MOCK: (),
}


@dataclass
class ProviderConfig:
    """
    Which provider serves a request, and how it is called.

    ``credential=None`` means "look it up"; an explicit empty string is
    kept as-is and fails the credential check when the client is built.
    """
    provider: ProviderKind = ProviderKind.ANTHROPIC
    model: Optional[str] = None
    credential: Optional[str] = None
    temperature: float = 0.3
    max_tokens: Optional[int] = None
    timeout: int = 300  # seconds
    max_retries: int = 2

    def __post_init__(self):
        if isinstance(self.provider, str):
            self.provider = ProviderKind.from_string(self.provider)
        if not self.model:
            self.model = DEFAULT_MODELS[self.provider]
        if self.max_tokens is None:
            self.max_tokens = DEFAULT_MAX_TOKENS[self.provider]
        if self.credential is None:
            self.credential = _credential_from_env(self.provider)

    def describe(self) -> str:
        return f"{self.provider.value}/{self.model}"


def _credential_from_env(provider: ProviderKind) -> Optional[str]:
    for name in CREDENTIAL_ENV_VARS[provider]:
        value = os.getenv(name)
        if value:
            return value
    return None


@dataclass
class UploadConfig:
    """Configuration for the file-upload provider protocol."""
    poll_interval: float = 1.5   # seconds between state checks
    timeout: float = 120.0       # seconds a file may stay pending
    max_anchor_levels: int = 5   # directories checked walking upward
    marker_file: str = ".env"
    staging_folder: str = "uploads-to-GenAI"
    key_names: Tuple[str, ...] = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

    def __post_init__(self):
        if isinstance(self.key_names, str):
            self.key_names = (self.key_names,)
        else:
            self.key_names = tuple(self.key_names)
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.max_anchor_levels < 1:
            raise ValueError("max_anchor_levels must be at least 1")


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    file: Optional[Path] = None

    def __post_init__(self):
        if self.file and isinstance(self.file, str):
            self.file = Path(self.file)


@dataclass
class AppConfig:
    """
    Root configuration object containing all settings.

    Can be loaded from YAML file or constructed programmatically.
    """
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    uploads: UploadConfig = field(default_factory=UploadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> 'AppConfig':
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppConfig':
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            AppConfig instance
        """
        try:
            return cls(
                provider=ProviderConfig(**data.get('provider', {})),
                uploads=UploadConfig(**data.get('uploads', {})),
                logging=LoggingConfig(**data.get('logging', {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to a dictionary.

        Credentials are never serialized.

        Returns:
            Configuration as dictionary
        """
        return {
            'provider': {
                'provider': self.provider.provider.value,
                'model': self.provider.model,
                'temperature': self.provider.temperature,
                'max_tokens': self.provider.max_tokens,
                'timeout': self.provider.timeout,
                'max_retries': self.provider.max_retries,
            },
            'uploads': {
                'poll_interval': self.uploads.poll_interval,
                'timeout': self.uploads.timeout,
                'max_anchor_levels': self.uploads.max_anchor_levels,
                'marker_file': self.uploads.marker_file,
                'staging_folder': self.uploads.staging_folder,
                'key_names': list(self.uploads.key_names),
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file': str(self.logging.file) if self.logging.file else None,
            },
        }

    def save_yaml(self, path: Path | str) -> None:
        """
        Save configuration to a YAML file.

        Args:
            path: Path to output YAML file
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)


def get_default_config() -> AppConfig:
    """
    Get the default application configuration.

    Returns:
        AppConfig with all default values
    """
    return AppConfig()


def load_config(config_path: Optional[Path | str] = None) -> AppConfig:
    """
    Load configuration from file or return defaults.

    Looks for config in this order:
    1. Provided path
    2. ./config/default.yaml
    3. ./config.yaml
    4. ~/.gamegen/config.yaml
    5. Default values

    Args:
        config_path: Optional path to config file

    Returns:
        AppConfig instance
    """
    if config_path:
        return AppConfig.from_yaml(config_path)

    default_paths = [
        Path("config/default.yaml"),
        Path("config.yaml"),
        Path.home() / ".gamegen" / "config.yaml",
    ]

    for path in default_paths:
        if path.exists():
            return AppConfig.from_yaml(path)

    return get_default_config()
