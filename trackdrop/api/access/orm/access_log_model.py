"""Access log ORM model."""

from sqlalchemy import Column, DateTime, Integer, String

from trackdrop.database import Base


class AccessLogModel(Base):
    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Soft reference to uploads.id; checked by the recorder, not by a constraint
    upload_id = Column(String, nullable=False, index=True)
    ip_address = Column(String, nullable=True)
    country = Column(String, nullable=True)
    city = Column(String, nullable=True)
    device_type = Column(String, nullable=True)
    device_vendor = Column(String, nullable=True)
    device_model = Column(String, nullable=True)
    os_name = Column(String, nullable=True)
    os_version = Column(String, nullable=True)
    browser_name = Column(String, nullable=True)
    browser_version = Column(String, nullable=True)
    language = Column(String, nullable=True)
    file_accessed = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
