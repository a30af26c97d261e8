"""Upload Data Transfer Objects."""

from datetime import datetime

from pydantic import BaseModel


class FileRecord(BaseModel):
    original_name: str
    stored_name: str
    size_bytes: int
    mime_type: str = "application/octet-stream"


class UploadSession(BaseModel):
    id: str
    created_at: datetime
    files: list[FileRecord]
    total_files: int
    total_size: int

    def find_file(self, original_name: str) -> FileRecord | None:
        """First file whose original name matches exactly."""
        for record in self.files:
            if record.original_name == original_name:
                return record
        return None


class UploadedFile(BaseModel):
    name: str
    size: int


class UploadResponse(BaseModel):
    upload_id: str
    share_url: str
    files: list[UploadedFile]
    total_files: int
    total_size: int
