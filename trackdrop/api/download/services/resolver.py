"""Secure file resolver - maps (upload id, file name) to a path inside the sandbox."""

import logging
import os
from pathlib import Path, PurePosixPath, PureWindowsPath
from urllib.parse import unquote

from trackdrop.api.uploads.dto.upload import FileRecord
from trackdrop.api.uploads.repositories.uploads_repository import UploadSessionStore
from trackdrop.exceptions import NotFoundError, SandboxViolationError

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("trackdrop.security")


def _is_traversal(value: str) -> bool:
    if "\x00" in value:
        return True
    if "/" in value or "\\" in value:
        return True
    if value in (".", ".."):
        return True
    return bool(
        PurePosixPath(value).is_absolute()
        or PureWindowsPath(value).drive
        or PureWindowsPath(value).is_absolute()
    )


def looks_like_traversal(value: str) -> bool:
    """True for separators, dot segments, absolute paths or drive letters, raw or percent-decoded."""
    decoded = value
    # Double-encoded sequences decode one layer per pass
    for _ in range(3):
        if _is_traversal(decoded):
            return True
        next_value = unquote(decoded)
        if next_value == decoded:
            break
        decoded = next_value
    return _is_traversal(decoded)


class SecureFileResolver:
    def __init__(self, store: UploadSessionStore, sandbox_root: Path):
        self.store = store
        self.sandbox_root = Path(os.path.realpath(sandbox_root))

    def _deny(self, upload_id: str, name: str, reason: str):
        security_logger.warning(
            "Sandbox violation: upload=%r name=%r (%s)", upload_id, name, reason
        )
        raise SandboxViolationError("Access denied")

    def resolve_record(self, upload_id: str, record: FileRecord) -> Path:
        """Canonical on-disk path of a stored file; existence is not checked."""
        if looks_like_traversal(upload_id):
            self._deny(upload_id, record.stored_name, "upload id")
        candidate = self.sandbox_root / upload_id / record.stored_name
        canonical = Path(os.path.realpath(candidate))
        # Boundary-aware: "/data/files-evil" must not pass for "/data/files"
        if not str(canonical).startswith(str(self.sandbox_root) + os.sep):
            self._deny(upload_id, record.stored_name, f"resolves to {canonical}")
        return canonical

    def resolve(self, upload_id: str, requested_name: str) -> Path:
        if looks_like_traversal(upload_id):
            self._deny(upload_id, requested_name, "upload id")
        if looks_like_traversal(requested_name):
            self._deny(upload_id, requested_name, "requested name")

        upload = self.store.get(upload_id)
        if upload is None:
            raise NotFoundError("Upload not found")
        record = upload.find_file(requested_name)
        if record is None:
            raise NotFoundError("File not found")

        path = self.resolve_record(upload_id, record)
        if not path.is_file():
            logger.warning("File %s of upload %s is missing on disk", record.stored_name, upload_id)
            raise NotFoundError("File not found")
        return path
