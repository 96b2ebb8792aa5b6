"""
Uploads module - File-upload provider protocol.

Anchor discovery, per-request staging, and the upload lifecycle
(stage, upload, wait for ACTIVE, cleanup).
"""

from .anchor import find_anchor_directory, load_anchor_credential
from .staging import StagingArea
from .lifecycle import UploadLifecycleManager, FilesClient

__all__ = [
    'find_anchor_directory',
    'load_anchor_credential',
    'StagingArea',
    'UploadLifecycleManager',
    'FilesClient',
]
