"""
Data Models Layer.

This package contains Pydantic models for the manifest documents exchanged with
the update server and for the updater's own run configuration.
"""

from .config import UpdaterConfig
from .manifest import (
    ComponentRecord,
    LocalManifestRecord,
    ManifestDocument,
    needs_update,
)

__all__ = [
    "ComponentRecord",
    "LocalManifestRecord",
    "ManifestDocument",
    "UpdaterConfig",
    "needs_update",
]
