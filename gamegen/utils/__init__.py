"""
Utilities module - Common helper functions and classes.
"""

from .naming import (
    generate_short_id,
    safe_filename,
    artifact_timestamp,
    unique_path,
)
from .logger import (
    setup_logging,
    reset_logging,
    get_logger,
    LogContext,
    ProgressLogger,
    log_exception,
)

__all__ = [
    # Naming
    'generate_short_id',
    'safe_filename',
    'artifact_timestamp',
    'unique_path',
    # Logging
    'setup_logging',
    'reset_logging',
    'get_logger',
    'LogContext',
    'ProgressLogger',
    'log_exception',
]
