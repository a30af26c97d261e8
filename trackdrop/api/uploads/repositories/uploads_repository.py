"""Uploads repository - persists immutable upload sessions."""

import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from trackdrop.api.uploads.dto.upload import FileRecord, UploadSession
from trackdrop.api.uploads.orm.upload_model import UploadModel
from trackdrop.exceptions import DuplicateUploadIdError

logger = logging.getLogger(__name__)


def as_utc(dt: datetime | None) -> datetime | None:
    """Aware UTC form of dt. Naive values are taken to be UTC already."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def model_to_dto(model: UploadModel) -> UploadSession:
    return UploadSession(
        id=model.id,
        created_at=as_utc(model.created_at),
        files=[FileRecord.model_validate(f) for f in model.files],
        total_files=model.total_files,
        total_size=model.total_size,
    )


class UploadSessionStore:
    """Create-then-read-forever storage for upload sessions."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create(
        self,
        upload_id: str,
        files: list[FileRecord],
        total_size: int,
        created_at: datetime | None = None,
    ) -> UploadSession:
        if total_size != sum(f.size_bytes for f in files):
            raise ValueError("total_size does not match the sum of file sizes")
        stored_names = [f.stored_name for f in files]
        if len(set(stored_names)) != len(stored_names):
            raise ValueError("stored names must be unique within an upload")

        with self._session_factory() as session:
            model = UploadModel(
                id=upload_id,
                files=[f.model_dump() for f in files],
                created_at=as_utc(created_at) or datetime.now(timezone.utc),
                total_files=len(files),
                total_size=total_size,
            )
            session.add(model)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.error("Upload id collision for %s", upload_id)
                raise DuplicateUploadIdError(upload_id) from e
            session.refresh(model)
            return model_to_dto(model)

    def get(self, upload_id: str) -> UploadSession | None:
        with self._session_factory() as session:
            model = session.get(UploadModel, upload_id)
            return model_to_dto(model) if model else None

    def exists(self, upload_id: str) -> bool:
        with self._session_factory() as session:
            return session.get(UploadModel, upload_id) is not None

    def count(self) -> int:
        with self._session_factory() as session:
            return session.query(func.count(UploadModel.id)).scalar() or 0

    def total_size(self) -> int:
        """Bytes stored across all uploads."""
        with self._session_factory() as session:
            return session.query(func.sum(UploadModel.total_size)).scalar() or 0
