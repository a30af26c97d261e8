"""Access recorder - appends one access event per read request, best-effort."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from fastapi import Request

from trackdrop.api.access.dto.access import AccessEvent, AccessEventCreate, RequestMeta
from trackdrop.api.access.repositories.access_repository import AccessLogRepository
from trackdrop.api.access.services.geo import GeoLocator
from trackdrop.api.access.services.user_agent import parse_user_agent
from trackdrop.api.uploads.repositories.uploads_repository import UploadSessionStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def first_language(header: str | None) -> str | None:
    """First preference of an Accept-Language header, without its q-weight."""
    if not header:
        return None
    language = header.split(",")[0].split(";")[0].strip()
    return language or None


def request_meta(request: Request, trust_proxy: bool = False) -> RequestMeta:
    ip = request.client.host if request.client else None
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        if forwarded.strip():
            ip = forwarded.split(",")[0].strip()
    return RequestMeta(
        ip=ip,
        user_agent=request.headers.get("User-Agent"),
        accept_language=request.headers.get("Accept-Language"),
    )


class AccessRecorder:
    def __init__(
        self,
        repository: AccessLogRepository,
        store: UploadSessionStore,
        geo: GeoLocator,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.store = store
        self.geo = geo
        self.clock = clock

    def build_event(
        self, upload_id: str, meta: RequestMeta, file_accessed: str | None = None
    ) -> AccessEventCreate:
        client = parse_user_agent(meta.user_agent)
        location = self.geo.lookup(meta.ip)
        return AccessEventCreate(
            upload_id=upload_id,
            ip_address=meta.ip or None,
            country=location.country,
            city=location.city,
            device_type=client.device_type,
            device_vendor=client.device_vendor,
            device_model=client.device_model,
            os_name=client.os_name,
            os_version=client.os_version,
            browser_name=client.browser_name,
            browser_version=client.browser_version,
            language=first_language(meta.accept_language),
            file_accessed=file_accessed,
            timestamp=self.clock(),
        )

    def record(
        self, upload_id: str, meta: RequestMeta, file_accessed: str | None = None
    ) -> AccessEvent | None:
        """Persist one access event. Never raises; returns None when nothing was stored."""
        try:
            if not self.store.exists(upload_id):
                logger.warning("Dropping access event for unknown upload %r", upload_id)
                return None
            return self.repository.append(self.build_event(upload_id, meta, file_accessed))
        except Exception:
            logger.exception("Failed to record access to upload %s", upload_id)
            return None
