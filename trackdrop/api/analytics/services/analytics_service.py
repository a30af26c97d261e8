"""Analytics service - read-only rollups over uploads and the access log.

Every call rescans the log; nothing is cached, so results are never stale.
"""

from collections.abc import Callable
from datetime import datetime, time, timedelta, timezone

from trackdrop.api.access.dto.access import AccessEvent
from trackdrop.api.access.orm.access_log_model import AccessLogModel
from trackdrop.api.access.repositories.access_repository import AccessLogRepository
from trackdrop.api.analytics.dto.analytics import (
    AccessSummary,
    CountryCount,
    DailyCount,
    DashboardStats,
    DeviceCount,
    GeneralStats,
    UploadStats,
    UploadSummary,
)
from trackdrop.api.uploads.repositories.uploads_repository import UploadSessionStore

DAILY_WINDOW_DAYS = 30
TOP_COUNTRIES = 10
RECENT_ACCESSES = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalyticsAggregator:
    def __init__(
        self,
        store: UploadSessionStore,
        repository: AccessLogRepository,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.repository = repository
        self.clock = clock

    def _daily(self, upload_id: str | None = None) -> list[DailyCount]:
        # Midnight UTC of the oldest of the last 30 calendar dates, today included
        today = self.clock().astimezone(timezone.utc).date()
        first_day = today - timedelta(days=DAILY_WINDOW_DAYS - 1)
        since = datetime.combine(first_day, time.min, tzinfo=timezone.utc)
        return [
            DailyCount(date=day, accesses=accesses, unique_visitors=visitors)
            for day, accesses, visitors in self.repository.daily_counts(since, upload_id)
        ]

    def _countries(self, upload_id: str | None = None) -> list[CountryCount]:
        return [
            CountryCount(country=country, count=count)
            for country, count in self.repository.count_by(
                AccessLogModel.country, upload_id, limit=TOP_COUNTRIES
            )
        ]

    def upload_stats(self, upload_id: str) -> UploadStats | None:
        upload = self.store.get(upload_id)
        if upload is None:
            return None
        return UploadStats(
            upload=upload,
            stats=AccessSummary(**self.repository.summary(upload_id)),
            daily_stats=self._daily(upload_id),
            country_stats=self._countries(upload_id),
            recent_accesses=self.repository.recent(upload_id, RECENT_ACCESSES),
        )

    def dashboard_stats(self) -> DashboardStats:
        uploads = [
            UploadSummary(
                id=upload.id,
                created_at=upload.created_at,
                files=upload.files,
                total_files=upload.total_files,
                total_size=upload.total_size,
                total_accesses=accesses,
                unique_visitors=visitors,
                last_access=last_access,
            )
            for upload, accesses, visitors, last_access in self.repository.upload_summaries()
        ]
        summary = self.repository.summary()
        general = GeneralStats(
            total_uploads=self.store.count(),
            total_accesses=summary["total_accesses"],
            unique_visitors=summary["unique_visitors"],
            total_storage=self.store.total_size(),
        )
        devices = [
            DeviceCount(device_type=device_type, count=count)
            for device_type, count in self.repository.count_by(AccessLogModel.device_type)
        ]
        return DashboardStats(
            uploads=uploads,
            general_stats=general,
            daily_stats=self._daily(),
            country_stats=self._countries(),
            device_stats=devices,
        )

    def export_all(self) -> list[AccessEvent]:
        return self.repository.list_all()
