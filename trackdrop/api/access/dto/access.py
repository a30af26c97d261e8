"""Access event Data Transfer Objects."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

# file_accessed value for a download of the whole upload as one archive
BUNDLE_SENTINEL = "ZIP_DOWNLOAD"

UNKNOWN = "Unknown"


def display(value) -> str:
    """Presentation form of an optional field."""
    if value is None or value == "":
        return UNKNOWN
    return str(value)


@dataclass(frozen=True)
class RequestMeta:
    ip: str | None = None
    user_agent: str | None = None
    accept_language: str | None = None


@dataclass(frozen=True)
class GeoLocation:
    country: str | None = None
    city: str | None = None


@dataclass(frozen=True)
class ClientInfo:
    device_type: str | None = None
    device_vendor: str | None = None
    device_model: str | None = None
    os_name: str | None = None
    os_version: str | None = None
    browser_name: str | None = None
    browser_version: str | None = None


class AccessEventCreate(BaseModel):
    upload_id: str
    ip_address: str | None = None
    country: str | None = None
    city: str | None = None
    device_type: str | None = None
    device_vendor: str | None = None
    device_model: str | None = None
    os_name: str | None = None
    os_version: str | None = None
    browser_name: str | None = None
    browser_version: str | None = None
    language: str | None = None
    file_accessed: str | None = None
    timestamp: datetime


class AccessEvent(AccessEventCreate):
    id: int
