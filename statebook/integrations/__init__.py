"""Statebook integration clients.

All clients implement ``BaseIntegration``.
"""

from statebook.integrations.base import BaseIntegration
from statebook.integrations.storage import BlobClient, StoredUpload, UploadStore

__all__ = [
    "BaseIntegration",
    "BlobClient",
    "StoredUpload",
    "UploadStore",
]
