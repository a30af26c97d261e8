"""Pages controller - HTML share page."""

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from trackdrop.api.access.services.access_recorder import request_meta
from trackdrop.api.download.controllers.download_controller import file_response
from trackdrop.dependencies import Services, get_services

router = APIRouter(tags=["Pages"])

TEMPLATES_DIR = Path(__file__).parent.parent.parent.parent / "templates"
templates = Jinja2Templates(directory=TEMPLATES_DIR)


def _filesize(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024**2:
        return f"{size / 1024:.1f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.1f} MB"
    return f"{size / 1024**3:.1f} GB"


templates.env.filters["filesize"] = _filesize


@router.get("/share/{upload_id}", response_class=HTMLResponse)
def share_page(request: Request, upload_id: str, services: Services = Depends(get_services)):
    """Landing page of a share link; a single-file upload downloads directly."""
    upload = services.store.get(upload_id)
    if not upload:
        raise HTTPException(status_code=404, detail="Upload not found")

    services.recorder.record(upload_id, request_meta(request, services.trust_proxy))

    if len(upload.files) == 1:
        return file_response(services, request, upload_id, upload.files[0].original_name)

    return templates.TemplateResponse(request, "share.html", {"upload": upload})
