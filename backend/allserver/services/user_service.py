"""
All-Server Backend — User Service
===================================

What:  CRUD operations for the users collection.
How:   One SQL statement per operation through the request's AsyncSession.
Who:   Called by the /api/users route handlers.

Error Handling:
    Each method is a single try block. NotFoundError propagates as-is;
    anything else is logged with its traceback and re-raised as DatabaseError
    carrying the operation's generic message.

UserService is stateless; the session is passed into every call.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from allserver.exceptions import AllServerError, DatabaseError, NotFoundError
from allserver.models.user import User
from allserver.schemas.user import (
    UserCreate,
    UserCreatedResponse,
    UserResponse,
    UserUpdate,
)

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "用户不存在"


def format_display_date(moment: Optional[datetime] = None) -> str:
    """
    Format a date the way the user table stores it: "2025年1月6日".

    Month and day are not zero padded.
    """
    moment = moment or datetime.now()
    return f"{moment.year}年{moment.month}月{moment.day}日"


class UserService:
    """Business logic for /api/users."""

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        try:
            result = await db.execute(select(User))
            return [UserResponse.model_validate(user) for user in result.scalars().all()]
        except Exception as e:
            logger.error("获取用户列表失败: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="获取用户列表失败",
                context={"error_type": type(e).__name__},
            )

    async def get_user(self, db: AsyncSession, user_id: int) -> UserResponse:
        """
        Retrieve a single user by id.

        Raises:
            NotFoundError: no row with that id (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFoundError(message=USER_NOT_FOUND, resource="user", resource_id=user_id)
            return UserResponse.model_validate(user)
        except AllServerError:
            raise
        except Exception as e:
            logger.error("获取用户信息失败 (id=%s): %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="获取用户信息失败", context={"user_id": user_id})

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserCreatedResponse:
        """
        Insert a user and return its generated id.

        The display date and both timestamps come from the server clock at
        request time.
        """
        now = datetime.now()
        try:
            user = User(
                name=data.name,
                email=data.email,
                date=format_display_date(now),
                created_at=now,
                updated_at=now,
            )
            db.add(user)
            await db.commit()
            logger.info("User created: id=%s", user.id)
            return UserCreatedResponse(id=user.id, message="用户创建成功")
        except Exception as e:
            logger.error("创建用户失败: %s", str(e), exc_info=True)
            raise DatabaseError(message="创建用户失败", context={"error_type": type(e).__name__})

    async def update_user(self, db: AsyncSession, user_id: int, data: UserUpdate) -> str:
        """Overwrite name and email (no partial update). Returns the success message."""
        try:
            result = await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(name=data.name, email=data.email, updated_at=datetime.now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(message=USER_NOT_FOUND, resource="user", resource_id=user_id)
            await db.commit()
            logger.info("User updated: id=%s", user_id)
            return "用户信息更新成功"
        except AllServerError:
            raise
        except Exception as e:
            logger.error("更新用户信息失败 (id=%s): %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="更新用户信息失败", context={"user_id": user_id})

    async def delete_user(self, db: AsyncSession, user_id: int) -> str:
        try:
            result = await db.execute(
                delete(User)
                .where(User.id == user_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(message=USER_NOT_FOUND, resource="user", resource_id=user_id)
            await db.commit()
            logger.info("User deleted: id=%s", user_id)
            return "用户删除成功"
        except AllServerError:
            raise
        except Exception as e:
            logger.error("删除用户失败 (id=%s): %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="删除用户失败", context={"user_id": user_id})


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless: the session is injected per call
user_service = UserService()
