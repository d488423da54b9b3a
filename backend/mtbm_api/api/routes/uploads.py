"""Uploads API - Profile photo upload"""
from fastapi import APIRouter, Depends, File, Request, UploadFile

from ..deps import get_media_service
from ...domain.enums import MediaKind
from ...services.media_service import MediaService

router = APIRouter()


@router.post("/avatar")
def upload_avatar(
    request: Request,
    file: UploadFile = File(...),
    media_service: MediaService = Depends(get_media_service)
):
    """
    Public so the signup form can upload a photo before the account exists.

    Returns the stored path and an absolute URL for immediate display.
    """
    stored = media_service.store(file, MediaKind.AVATAR, MediaService.AVATAR_FOLDER)
    base_url = str(request.base_url).rstrip("/")
    return {"url": f"{base_url}{stored.path}", "path": stored.path}
