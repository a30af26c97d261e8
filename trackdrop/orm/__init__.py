"""Central ORM module - imports all models for metadata discovery."""

from trackdrop.api.access.orm import AccessLogModel
from trackdrop.api.uploads.orm import UploadModel

__all__ = [
    "AccessLogModel",
    "UploadModel",
]
