"""
All-Server Backend — User Route Handlers
==========================================

What:  GET/POST /api/users and GET/PUT/DELETE /api/users/{id}.
How:   Each handler pulls the session from get_db_session, delegates to
       UserService, and returns the response model. Errors raised by the
       service are turned into {"message": ...} by the global handlers.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from allserver.database import get_db_session
from allserver.exceptions import NotFoundError
from allserver.schemas.common import ErrorResponse, MessageResponse
from allserver.schemas.user import (
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
)
from allserver.services.user_service import USER_NOT_FOUND, user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["用户管理"])

_SERVER_ERROR = {500: {"description": "服务器错误", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "用户不存在", "model": ErrorResponse}}


async def user_id_path(user_id: str = Path(description="用户ID")) -> int:
    """An id that is not a number matches no user."""
    try:
        return int(user_id)
    except ValueError:
        raise NotFoundError(message=USER_NOT_FOUND, resource="user", resource_id=user_id)


@router.get(
    "",
    response_model=List[UserResponse],
    responses=_SERVER_ERROR,
    summary="获取所有用户列表",
    description="返回系统中所有用户的信息列表",
)
async def list_users(db: AsyncSession = Depends(get_db_session)) -> List[UserResponse]:
    return await user_service.list_users(db)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="获取单个用户信息",
    description="根据用户ID获取特定用户的详细信息",
)
async def get_user(
    user_id: int = Depends(user_id_path),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    return await user_service.get_user(db, user_id)


@router.post(
    "",
    status_code=201,
    response_model=UserCreatedResponse,
    responses=_SERVER_ERROR,
    summary="创建新用户",
    description="创建一个新的用户记录，日期字段由服务器按当天日期生成",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserCreatedResponse:
    return await user_service.create_user(db, body)


@router.put(
    "/{user_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="更新用户信息",
    description="根据用户ID更新特定用户的名称和邮箱",
)
async def update_user(
    body: UserUpdate,
    user_id: int = Depends(user_id_path),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await user_service.update_user(db, user_id, body)
    return MessageResponse(message=message)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    responses={**_NOT_FOUND, **_SERVER_ERROR},
    summary="删除用户",
    description="根据用户ID删除特定用户",
)
async def delete_user(
    user_id: int = Depends(user_id_path),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    message = await user_service.delete_user(db, user_id)
    return MessageResponse(message=message)
