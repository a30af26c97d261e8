"""Upload controller - multipart uploads and session lookup."""

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from trackdrop.api.uploads.dto.upload import UploadResponse, UploadSession
from trackdrop.api.uploads.services.upload_service import FileTooLargeError
from trackdrop.config import BASE_URL
from trackdrop.dependencies import Services, get_services
from trackdrop.exceptions import DuplicateUploadIdError

router = APIRouter(tags=["Upload"])


@router.post("/api/upload", response_model=UploadResponse, status_code=201)
async def upload_files(
    request: Request,
    files: list[UploadFile] | None = File(None),
    services: Services = Depends(get_services),
):
    """Store one or more files under a fresh share id."""
    base_url = BASE_URL or str(request.base_url).rstrip("/")
    try:
        return await services.upload_service.save_upload(files or [], base_url)
    except FileTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except DuplicateUploadIdError:
        raise HTTPException(status_code=500, detail="Upload failed, please retry")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/api/uploads/{upload_id}", response_model=UploadSession)
def get_upload(upload_id: str, services: Services = Depends(get_services)):
    upload = services.store.get(upload_id)
    if not upload:
        raise HTTPException(status_code=404, detail="Upload not found")
    return upload
