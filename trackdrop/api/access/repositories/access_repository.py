"""Access log repository - append-only event storage and rollup queries."""

from datetime import date, datetime

from sqlalchemy import distinct, func
from sqlalchemy.orm import sessionmaker

from trackdrop.api.access.dto.access import AccessEvent, AccessEventCreate
from trackdrop.api.access.orm.access_log_model import AccessLogModel
from trackdrop.api.uploads.orm.upload_model import UploadModel
from trackdrop.api.uploads.repositories.uploads_repository import as_utc, model_to_dto


def _model_to_dto(model: AccessLogModel) -> AccessEvent:
    return AccessEvent(
        id=model.id,
        upload_id=model.upload_id,
        ip_address=model.ip_address,
        country=model.country,
        city=model.city,
        device_type=model.device_type,
        device_vendor=model.device_vendor,
        device_model=model.device_model,
        os_name=model.os_name,
        os_version=model.os_version,
        browser_name=model.browser_name,
        browser_version=model.browser_version,
        language=model.language,
        file_accessed=model.file_accessed,
        timestamp=as_utc(model.timestamp),
    )


def _as_date(value) -> date:
    # SQLite's date() returns text, other backends return a date
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _scoped(query, upload_id: str | None):
    if upload_id is not None:
        query = query.filter(AccessLogModel.upload_id == upload_id)
    return query


class AccessLogRepository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def append(self, event: AccessEventCreate) -> AccessEvent:
        with self._session_factory() as session:
            model = AccessLogModel(**event.model_dump())
            # Stored wall-clock time is always UTC
            model.timestamp = as_utc(event.timestamp)
            session.add(model)
            session.commit()
            session.refresh(model)
            return _model_to_dto(model)

    def list_all(self) -> list[AccessEvent]:
        with self._session_factory() as session:
            models = (
                session.query(AccessLogModel)
                .order_by(AccessLogModel.timestamp.desc(), AccessLogModel.id.desc())
                .all()
            )
            return [_model_to_dto(m) for m in models]

    def recent(self, upload_id: str, limit: int = 50) -> list[AccessEvent]:
        with self._session_factory() as session:
            models = (
                _scoped(session.query(AccessLogModel), upload_id)
                .order_by(AccessLogModel.timestamp.desc(), AccessLogModel.id.desc())
                .limit(limit)
                .all()
            )
            return [_model_to_dto(m) for m in models]

    def summary(self, upload_id: str | None = None) -> dict:
        with self._session_factory() as session:
            row = _scoped(
                session.query(
                    func.count(AccessLogModel.id),
                    func.count(distinct(AccessLogModel.ip_address)),
                    func.count(distinct(AccessLogModel.country)),
                    func.count(distinct(AccessLogModel.device_type)),
                ),
                upload_id,
            ).one()
            return {
                "total_accesses": row[0] or 0,
                "unique_visitors": row[1] or 0,
                "countries_count": row[2] or 0,
                "device_types_count": row[3] or 0,
            }

    def daily_counts(self, since: datetime, upload_id: str | None = None) -> list[tuple[date, int, int]]:
        """(date, accesses, unique visitors) per calendar date of the stored timestamp, newest first."""
        day = func.date(AccessLogModel.timestamp)
        with self._session_factory() as session:
            rows = (
                _scoped(
                    session.query(
                        day,
                        func.count(AccessLogModel.id),
                        func.count(distinct(AccessLogModel.ip_address)),
                    ),
                    upload_id,
                )
                .filter(AccessLogModel.timestamp >= as_utc(since))
                .group_by(day)
                .order_by(day.desc())
                .all()
            )
            return [(_as_date(d), count, visitors) for d, count, visitors in rows]

    def count_by(self, column, upload_id: str | None = None, limit: int | None = None) -> list[tuple]:
        """(value, count) groups ordered by count desc, then value."""
        total = func.count(AccessLogModel.id)
        with self._session_factory() as session:
            query = (
                _scoped(session.query(column, total), upload_id)
                .group_by(column)
                .order_by(total.desc(), column.asc())
            )
            if limit is not None:
                query = query.limit(limit)
            return [(value, count) for value, count in query.all()]

    def upload_summaries(self) -> list[tuple]:
        """Every upload, newest first, with its access count, distinct IPs and last access."""
        with self._session_factory() as session:
            rows = (
                session.query(
                    UploadModel,
                    func.count(AccessLogModel.id),
                    func.count(distinct(AccessLogModel.ip_address)),
                    func.max(AccessLogModel.timestamp),
                )
                .outerjoin(AccessLogModel, AccessLogModel.upload_id == UploadModel.id)
                .group_by(UploadModel.id)
                .order_by(UploadModel.created_at.desc(), UploadModel.id.asc())
                .all()
            )
            return [
                (model_to_dto(upload), count or 0, visitors or 0, as_utc(last_access))
                for upload, count, visitors, last_access in rows
            ]
