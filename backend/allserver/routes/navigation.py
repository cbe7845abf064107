"""
All-Server Backend — Navigation Route Handlers
================================================

What:  CRUD for /api/navigation plus POST /api/navigation/upload.
How:   Thin handlers over NavigationService and UploadService.

Upload request flow:
    0. UploadSizeLimitMiddleware rejects an oversized Content-Length
    1. FastAPI parses the multipart body ("file" field)
    2. accepted_svg_upload() runs the pre-checks (presence, MIME, size)
    3. The handler asks UploadService to store and verify the file
    4. 201 with {message, file: {filename, path, size}}

The upload route is declared before /{site_id} so POST /upload is never parsed
as an id. Ids that are not numbers match no row: site_id_path() answers them
with 404 like any other missing site.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Path, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from allserver.database import get_db_session
from allserver.exceptions import NotFoundError
from allserver.schemas.common import ErrorResponse, MessageResponse
from allserver.schemas.navigation import (
    NavigationSiteCreate,
    NavigationSiteResponse,
    NavigationSiteUpdate,
    UploadResponse,
)
from allserver.services.navigation_service import SITE_NOT_FOUND, navigation_service
from allserver.services.upload_service import UploadService, get_upload_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/navigation", tags=["Navigation"])

_BAD_REQUEST = {400: {"description": "无效的请求", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "导航站点不存在", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "服务器错误", "model": ErrorResponse}}


async def site_id_path(site_id: str = Path(description="导航站点ID")) -> int:
    """An id that is not a number matches no navigation site."""
    try:
        return int(site_id)
    except ValueError:
        raise NotFoundError(message=SITE_NOT_FOUND, resource="navigation_site", resource_id=site_id)


async def accepted_svg_upload(
    file: Optional[UploadFile] = File(
        default=None,
        description="要上传的SVG文件（image/svg+xml，最大5MB）",
    ),
    uploads: UploadService = Depends(get_upload_service),
) -> UploadFile:
    """Upload pre-checks, resolved before the handler body runs."""
    return uploads.precheck(file)


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
    summary="上传SVG图片",
    description=(
        "Upload one SVG logo (multipart field 'file', image/svg+xml, max 5MB). "
        "The returned path can be used as the logo of a navigation site."
    ),
)
async def upload_svg(
    file: UploadFile = Depends(accepted_svg_upload),
    uploads: UploadService = Depends(get_upload_service),
) -> UploadResponse:
    logger.info(
        "Received SVG upload: filename=%s, declared size=%s",
        file.filename,
        file.size,
    )
    try:
        return await uploads.save_svg(file)
    finally:
        await file.close()


@router.get(
    "",
    response_model=List[NavigationSiteResponse],
    responses=_SERVER_ERROR,
    summary="获取所有导航站点",
)
async def list_sites(db: AsyncSession = Depends(get_db_session)) -> List[NavigationSiteResponse]:
    return await navigation_service.list_sites(db)


@router.get(
    "/{site_id}",
    response_model=NavigationSiteResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="获取单个导航站点",
)
async def get_site(
    site_id: int = Depends(site_id_path),
    db: AsyncSession = Depends(get_db_session),
) -> NavigationSiteResponse:
    return await navigation_service.get_site(db, site_id)


@router.post(
    "",
    status_code=201,
    response_model=NavigationSiteResponse,
    response_model_exclude_unset=True,
    responses={**_BAD_REQUEST, **_SERVER_ERROR},
    summary="创建新导航站点",
    description="logo、url和name为必填字段；logo必须以/uploads/svg/开头并以.svg结尾",
)
async def create_site(
    body: NavigationSiteCreate,
    db: AsyncSession = Depends(get_db_session),
) -> NavigationSiteResponse:
    return await navigation_service.create_site(db, body)


@router.put(
    "/{site_id}",
    response_model=NavigationSiteResponse,
    responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
    summary="更新导航站点信息",
    description=(
        "Partial update. logo/url/name are changed only when a non-empty value is "
        "sent; description is changed whenever the key is present, even if empty."
    ),
)
async def update_site(
    body: NavigationSiteUpdate,
    site_id: int = Depends(site_id_path),
    db: AsyncSession = Depends(get_db_session),
) -> NavigationSiteResponse:
    return await navigation_service.update_site(db, site_id, body.to_patch())


@router.delete(
    "/{site_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="删除导航站点",
)
async def delete_site(
    site_id: int = Depends(site_id_path),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await navigation_service.delete_site(db, site_id)
    return MessageResponse(message=message)
