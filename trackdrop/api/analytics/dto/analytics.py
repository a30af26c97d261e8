"""Analytics Data Transfer Objects."""

from datetime import date, datetime

from pydantic import BaseModel

from trackdrop.api.access.dto.access import AccessEvent
from trackdrop.api.uploads.dto.upload import FileRecord, UploadSession


class AccessSummary(BaseModel):
    total_accesses: int = 0
    unique_visitors: int = 0
    countries_count: int = 0
    device_types_count: int = 0


class DailyCount(BaseModel):
    date: date
    accesses: int
    unique_visitors: int


class CountryCount(BaseModel):
    country: str | None = None
    count: int


class DeviceCount(BaseModel):
    device_type: str | None = None
    count: int


class UploadStats(BaseModel):
    upload: UploadSession
    stats: AccessSummary
    daily_stats: list[DailyCount]
    country_stats: list[CountryCount]
    recent_accesses: list[AccessEvent]


class UploadSummary(BaseModel):
    id: str
    created_at: datetime
    files: list[FileRecord]
    total_files: int
    total_size: int
    total_accesses: int
    unique_visitors: int
    last_access: datetime | None = None


class GeneralStats(BaseModel):
    total_uploads: int
    total_accesses: int
    unique_visitors: int
    total_storage: int


class DashboardStats(BaseModel):
    uploads: list[UploadSummary]
    general_stats: GeneralStats
    daily_stats: list[DailyCount]
    country_stats: list[CountryCount]
    device_stats: list[DeviceCount]
