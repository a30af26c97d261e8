"""Service container - one set of components per application instance."""

from dataclasses import dataclass
from pathlib import Path

from fastapi import Request
from sqlalchemy.orm import sessionmaker

from trackdrop.api.access.repositories.access_repository import AccessLogRepository
from trackdrop.api.access.services.access_recorder import AccessRecorder
from trackdrop.api.access.services.geo import GeoLocator
from trackdrop.api.analytics.services.analytics_service import AnalyticsAggregator
from trackdrop.api.download.services.archiver import Archiver
from trackdrop.api.download.services.resolver import SecureFileResolver
from trackdrop.api.uploads.repositories.uploads_repository import UploadSessionStore
from trackdrop.api.uploads.services.upload_service import UploadService


@dataclass
class Services:
    store: UploadSessionStore
    access_repository: AccessLogRepository
    resolver: SecureFileResolver
    archiver: Archiver
    recorder: AccessRecorder
    analytics: AnalyticsAggregator
    upload_service: UploadService
    trust_proxy: bool = False


def build_services(
    session_factory: sessionmaker,
    files_dir: Path,
    geo: GeoLocator,
    max_file_size: int,
    trust_proxy: bool = False,
) -> Services:
    store = UploadSessionStore(session_factory)
    access_repository = AccessLogRepository(session_factory)
    resolver = SecureFileResolver(store, files_dir)
    return Services(
        store=store,
        access_repository=access_repository,
        resolver=resolver,
        archiver=Archiver(resolver),
        recorder=AccessRecorder(access_repository, store, geo),
        analytics=AnalyticsAggregator(store, access_repository),
        upload_service=UploadService(store, files_dir, max_file_size),
        trust_proxy=trust_proxy,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
