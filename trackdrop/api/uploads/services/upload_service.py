"""Upload service - stores multipart files and creates the upload session."""

import logging
import mimetypes
import re
import secrets
import shutil
from pathlib import Path, PureWindowsPath

from fastapi import UploadFile

from trackdrop.api.uploads.dto.upload import FileRecord, UploadedFile, UploadResponse
from trackdrop.api.uploads.repositories.uploads_repository import UploadSessionStore

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


class FileTooLargeError(ValueError):
    pass


def display_name(filename: str | None) -> str:
    """Reduce a client-supplied name to its final path component."""
    name = PureWindowsPath(filename or "").name
    name = name.replace("\x00", "").strip()
    if name in ("", ".", ".."):
        return "file"
    return name


def stored_name_for(original_name: str) -> str:
    """Random on-disk name that keeps a harmless extension."""
    suffix = Path(original_name).suffix.lower()
    if not re.fullmatch(r"\.[a-z0-9]{1,10}", suffix):
        suffix = ""
    return f"{secrets.token_hex(8)}{suffix}"


class UploadService:
    def __init__(self, store: UploadSessionStore, files_dir: Path, max_file_size: int):
        self.store = store
        self.files_dir = files_dir
        self.max_file_size = max_file_size

    def _new_upload_dir(self) -> tuple[str, Path]:
        """Pick an unused id and claim its directory."""
        while True:
            upload_id = secrets.token_urlsafe(16)
            if self.store.exists(upload_id):
                continue
            upload_dir = self.files_dir / upload_id
            try:
                upload_dir.mkdir(parents=True)
            except FileExistsError:
                continue
            return upload_id, upload_dir

    async def _save_one(self, file: UploadFile, upload_dir: Path) -> FileRecord:
        original_name = display_name(file.filename)
        stored_name = stored_name_for(original_name)
        size = 0
        with open(upload_dir / stored_name, "wb") as f:
            while chunk := await file.read(CHUNK_SIZE):
                size += len(chunk)
                if self.max_file_size and size > self.max_file_size:
                    raise FileTooLargeError(
                        f"{original_name} exceeds max size of {self.max_file_size} bytes"
                    )
                f.write(chunk)

        mime_type = file.content_type
        if not mime_type or mime_type == "application/octet-stream":
            mime_type, _ = mimetypes.guess_type(original_name)
        return FileRecord(
            original_name=original_name,
            stored_name=stored_name,
            size_bytes=size,
            mime_type=mime_type or "application/octet-stream",
        )

    async def save_upload(self, files: list[UploadFile], base_url: str) -> UploadResponse:
        """Stream every part to disk, then persist one session for all of them."""
        if not files:
            raise ValueError("No files uploaded")

        upload_id, upload_dir = self._new_upload_dir()
        try:
            records = [await self._save_one(f, upload_dir) for f in files]
            session = self.store.create(
                upload_id=upload_id,
                files=records,
                total_size=sum(r.size_bytes for r in records),
            )
        except Exception:
            shutil.rmtree(upload_dir, ignore_errors=True)
            raise

        logger.info(
            "Created upload %s with %d file(s), %d bytes",
            session.id, session.total_files, session.total_size,
        )
        return UploadResponse(
            upload_id=session.id,
            share_url=f"{base_url}/share/{session.id}",
            files=[UploadedFile(name=r.original_name, size=r.size_bytes) for r in session.files],
            total_files=session.total_files,
            total_size=session.total_size,
        )
