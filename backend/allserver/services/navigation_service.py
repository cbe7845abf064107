"""
All-Server Backend — Navigation Site Service
==============================================

What:  CRUD operations for the navigation_sites collection.
How:   Each method runs a short fixed sequence of statements through the
       request's AsyncSession. Update applies a NavigationSitePatch, so only
       the columns the caller supplied are written.
Who:   Called by the /api/navigation route handlers.

Logo convention:
    A logo is the public path of an uploaded SVG, so it must start with
    /uploads/svg/ and end with .svg. Create always checks it; update checks
    it only when a new logo is supplied.

Update sequence (not atomic against concurrent writers):
    1. SELECT the row            → 404 when missing
    2. Validate a supplied logo  → 400
    3. Build assignments          → 400 when nothing to update
    4. UPDATE                     → 404 when no row was affected
    5. SELECT the row again and return it
"""

import logging
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from allserver.exceptions import (
    AllServerError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from allserver.models.navigation import NavigationSite
from allserver.schemas.navigation import (
    NavigationSiteCreate,
    NavigationSitePatch,
    NavigationSiteResponse,
)

logger = logging.getLogger(__name__)

LOGO_PATH_PREFIX = "/uploads/svg/"
LOGO_EXTENSION = ".svg"

SITE_NOT_FOUND = "导航站点不存在"
INVALID_LOGO = "logo必须是有效的SVG文件路径"


def is_valid_logo_path(logo: str) -> bool:
    """True when logo looks like a path produced by the SVG upload endpoint."""
    return logo.startswith(LOGO_PATH_PREFIX) and logo.endswith(LOGO_EXTENSION)


class NavigationService:
    """Business logic for /api/navigation."""

    async def list_sites(self, db: AsyncSession) -> List[NavigationSiteResponse]:
        try:
            result = await db.execute(select(NavigationSite))
            return [
                NavigationSiteResponse.model_validate(site)
                for site in result.scalars().all()
            ]
        except Exception as e:
            logger.error("获取导航站点列表失败: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="获取导航站点列表失败",
                context={"error_type": type(e).__name__},
            )

    async def get_site(self, db: AsyncSession, site_id: int) -> NavigationSiteResponse:
        try:
            site = await self._fetch(db, site_id)
            if site is None:
                raise NotFoundError(message=SITE_NOT_FOUND, resource="navigation_site", resource_id=site_id)
            return NavigationSiteResponse.model_validate(site)
        except AllServerError:
            raise
        except Exception as e:
            logger.error("获取导航站点失败 (id=%s): %s", site_id, str(e), exc_info=True)
            raise DatabaseError(message="获取导航站点失败", context={"site_id": site_id})

    async def create_site(
        self, db: AsyncSession, data: NavigationSiteCreate
    ) -> NavigationSiteResponse:
        """
        Insert a navigation site.

        Raises:
            ValidationError: logo/url/name missing or empty, or malformed logo (→ 400)
            DatabaseError: insert failed (→ 500)
        """
        if not data.logo or not data.url or not data.name:
            raise ValidationError(message="logo、url和name为必填字段")
        if not is_valid_logo_path(data.logo):
            raise ValidationError(message=INVALID_LOGO, field="logo")

        try:
            site = NavigationSite(
                logo=data.logo,
                url=data.url,
                name=data.name,
                description=data.description,
            )
            db.add(site)
            await db.commit()
            logger.info("Navigation site created: id=%s name=%s", site.id, site.name)
            created = NavigationSiteResponse(
                id=site.id, logo=data.logo, url=data.url, name=data.name
            )
            # description is echoed only when the body carried the key
            if "description" in data.model_fields_set:
                created.description = data.description
            return created
        except Exception as e:
            logger.error("创建导航站点失败: %s", str(e), exc_info=True)
            raise DatabaseError(message="创建导航站点失败", context={"error_type": type(e).__name__})

    async def update_site(
        self, db: AsyncSession, site_id: int, patch: NavigationSitePatch
    ) -> NavigationSiteResponse:
        """
        Apply a partial update and return the re-read row.

        Raises:
            NotFoundError: row missing before or during the update (→ 404)
            ValidationError: malformed logo, or the patch sets nothing (→ 400)
            DatabaseError: any statement failed (→ 500)
        """
        try:
            if await self._fetch(db, site_id) is None:
                raise NotFoundError(message=SITE_NOT_FOUND, resource="navigation_site", resource_id=site_id)

            if patch.logo and not is_valid_logo_path(patch.logo):
                raise ValidationError(message=INVALID_LOGO, field="logo")

            if patch.is_empty():
                raise ValidationError(message="没有提供要更新的字段")
            assignments = patch.assignments()

            result = await db.execute(
                update(NavigationSite)
                .where(NavigationSite.id == site_id)
                .values(**assignments)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(
                    message="更新失败，导航站点不存在",
                    resource="navigation_site",
                    resource_id=site_id,
                )
            await db.commit()
            logger.info("Navigation site updated: id=%s fields=%s", site_id, sorted(assignments))

            updated = await self._fetch(db, site_id, refresh=True)
            return NavigationSiteResponse.model_validate(updated)
        except AllServerError:
            raise
        except Exception as e:
            logger.error("更新导航站点失败 (id=%s): %s", site_id, str(e), exc_info=True)
            raise DatabaseError(message="更新导航站点失败", context={"site_id": site_id})

    async def delete_site(self, db: AsyncSession, site_id: int) -> str:
        try:
            result = await db.execute(
                delete(NavigationSite)
                .where(NavigationSite.id == site_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(message=SITE_NOT_FOUND, resource="navigation_site", resource_id=site_id)
            await db.commit()
            logger.info("Navigation site deleted: id=%s", site_id)
            return "导航站点删除成功"
        except AllServerError:
            raise
        except Exception as e:
            logger.error("删除导航站点失败 (id=%s): %s", site_id, str(e), exc_info=True)
            raise DatabaseError(message="删除导航站点失败", context={"site_id": site_id})

    async def _fetch(self, db: AsyncSession, site_id: int, refresh: bool = False):
        query = select(NavigationSite).where(NavigationSite.id == site_id)
        if refresh:
            # The identity map still holds the pre-update row
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()


# ── Singleton Instance ────────────────────────────────────────────────────
navigation_service = NavigationService()
