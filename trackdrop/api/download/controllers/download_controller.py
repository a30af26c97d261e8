"""Download controller - single files and whole-upload zip bundles."""

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from trackdrop.api.access.dto.access import BUNDLE_SENTINEL
from trackdrop.api.access.services.access_recorder import request_meta
from trackdrop.api.uploads.dto.upload import FileRecord
from trackdrop.dependencies import Services, get_services
from trackdrop.exceptions import NotFoundError, SandboxViolationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Download"])

CHUNK_SIZE = 1024 * 1024  # 1MB


def content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "replace").decode().replace('"', "_").replace("?", "_")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


def iterfile(filepath: Path):
    with open(filepath, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            yield chunk


def file_response(services: Services, request: Request, upload_id: str, filename: str):
    """Resolve, record and stream one file."""
    try:
        filepath = services.resolver.resolve(upload_id, filename)
    except SandboxViolationError:
        raise HTTPException(status_code=403, detail="Access denied")
    except NotFoundError:
        raise HTTPException(status_code=404, detail="File not found")

    upload = services.store.get(upload_id)
    record: FileRecord | None = upload.find_file(filename) if upload else None
    services.recorder.record(upload_id, request_meta(request, services.trust_proxy), filename)

    media_type = record.mime_type if record else "application/octet-stream"
    return StreamingResponse(
        iterfile(filepath),
        media_type=media_type,
        headers={
            "Content-Disposition": content_disposition(filename),
            "Content-Length": str(filepath.stat().st_size),
        },
    )


@router.get("/api/download/{upload_id}/all")
def download_all(request: Request, upload_id: str, services: Services = Depends(get_services)):
    """Stream every file of the upload as one zip archive."""
    upload = services.store.get(upload_id)
    if not upload:
        raise HTTPException(status_code=404, detail="Upload not found")
    if not upload.files:
        raise HTTPException(status_code=404, detail="No files to download")

    services.recorder.record(upload_id, request_meta(request, services.trust_proxy), BUNDLE_SENTINEL)

    return StreamingResponse(
        services.archiver.stream(upload_id, upload.files),
        media_type="application/zip",
        headers={"Content-Disposition": content_disposition(f"archive-{upload_id}.zip")},
    )


@router.get("/api/download/{upload_id}/{filename:path}")
def download_file(
    request: Request, upload_id: str, filename: str, services: Services = Depends(get_services)
):
    """Stream a single file."""
    return file_response(services, request, upload_id, filename)
