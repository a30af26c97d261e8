"""Upload ORM model."""

from sqlalchemy import JSON, Column, DateTime, Integer, String

from trackdrop.database import Base


class UploadModel(Base):
    __tablename__ = "uploads"

    id = Column(String, primary_key=True)
    files = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    total_files = Column(Integer, nullable=False)
    total_size = Column(Integer, nullable=False)
