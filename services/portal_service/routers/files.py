"""Activity attachments stored in a bucket and listed by a per-activity manifest."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.base import new_id
from pydantic import ValidationError

from services.portal_service.models import FileCategory
from services.portal_service.schemas import (
    ActivityFile,
    ActivityFileList,
    ActivityFileUpdate,
    OkResponse,
    SignedUrlResponse,
)
from services.portal_service.storage import (
    StorageService,
    get_file_storage,
    guess_category,
    safe_file_name,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/activity-files", tags=["files"])


def _valid_files(items: list[dict]) -> list[ActivityFile]:
    files = []
    for item in items:
        try:
            files.append(ActivityFile.model_validate(item))
        except ValidationError:
            logger.warning(
                "Skipping malformed manifest entry",
                extra={"extra_fields": {"entry": str(item)[:200]}},
            )
    return files


def _find(items: list[dict], file_id: str) -> Optional[dict]:
    return next((i for i in items if str(i.get("id")) == file_id), None)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")


@router.get("/", response_model=ActivityFileList)
async def list_files(
    activity_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    storage: StorageService = Depends(get_file_storage),
):
    items = await storage.read_manifest(activity_id)
    return ActivityFileList(files=_valid_files(items))


@router.post("/upload", response_model=ActivityFileList, status_code=201)
async def upload_files(
    activity_id: str = Form(...),
    category: Optional[FileCategory] = Form(None),
    file: List[UploadFile] = File(...),
    current_user: AuthUser = Depends(get_current_user),
    storage: StorageService = Depends(get_file_storage),
):
    """Upload one or more files and append them to the activity manifest."""
    bucket = get_settings().ACTIVITY_FILES_BUCKET
    await storage.ensure_bucket(bucket)

    manifest = await storage.read_manifest(activity_id)
    uploaded = []
    for upload in file:
        data = await upload.read()
        file_id = new_id()
        name = safe_file_name(upload.filename or "file")
        path = f"{activity_id}/{file_id}-{name}"
        mime = upload.content_type or "application/octet-stream"
        try:
            await storage.upload(bucket, path, data, content_type=mime)
        except Exception as exc:
            logger.error(
                "File upload failed",
                extra={"extra_fields": {"activity_id": activity_id, "error": str(exc)}},
            )
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"Upload failed: {exc}",
            )
        uploaded.append(
            {
                "id": file_id,
                "activityId": activity_id,
                "name": name,
                "category": (category.value if category else guess_category(mime)),
                "mime": mime,
                "size": len(data),
                "path": path,
                "uploadedAt": utc_now().isoformat(),
            }
        )

    await storage.write_manifest(activity_id, manifest + uploaded)
    logger.info(
        "Uploaded activity files",
        extra={"extra_fields": {"activity_id": activity_id, "count": len(uploaded)}},
    )
    return ActivityFileList(files=_valid_files(uploaded))


@router.patch("/{file_id}", response_model=ActivityFile)
async def update_file(
    file_id: str,
    payload: ActivityFileUpdate,
    activity_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    storage: StorageService = Depends(get_file_storage),
):
    """Rename or recategorize a file. The stored object keeps its path."""
    manifest = await storage.read_manifest(activity_id)
    item = _find(manifest, file_id)
    if item is None:
        raise _not_found()

    if payload.name:
        item["name"] = safe_file_name(payload.name)
    if payload.category is not None:
        item["category"] = payload.category.value
    await storage.write_manifest(activity_id, manifest)
    return ActivityFile.model_validate(item)


@router.delete("/{file_id}", response_model=OkResponse)
async def delete_file(
    file_id: str,
    activity_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    storage: StorageService = Depends(get_file_storage),
):
    manifest = await storage.read_manifest(activity_id)
    item = _find(manifest, file_id)
    if item is None:
        raise _not_found()

    await storage.remove(get_settings().ACTIVITY_FILES_BUCKET, [item["path"]])
    await storage.write_manifest(activity_id, [i for i in manifest if i is not item])
    return OkResponse()


@router.get("/{file_id}/download", response_model=SignedUrlResponse)
async def download_file(
    file_id: str,
    activity_id: str = Query(...),
    current_user: AuthUser = Depends(get_current_user),
    storage: StorageService = Depends(get_file_storage),
):
    """Short-lived signed URL for the file (one hour by default)."""
    manifest = await storage.read_manifest(activity_id)
    item = _find(manifest, file_id)
    if item is None:
        raise _not_found()

    settings = get_settings()
    url = await storage.signed_url(
        settings.ACTIVITY_FILES_BUCKET, item["path"], settings.SIGNED_URL_TTL_SECONDS
    )
    return SignedUrlResponse(url=url)
