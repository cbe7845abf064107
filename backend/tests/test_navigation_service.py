"""
All-Server Backend — Navigation Service Unit Tests
=====================================================

What:  Tests for logo path rules, patch building, and NavigationService
       create/update/delete with a mocked AsyncSession.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from allserver.exceptions import DatabaseError, NotFoundError, ValidationError
from allserver.schemas.navigation import (
    UNSET,
    NavigationSiteCreate,
    NavigationSitePatch,
    NavigationSiteUpdate,
)
from allserver.services.navigation_service import (
    NavigationService,
    is_valid_logo_path,
)

LOGO = "/uploads/svg/1736150400000-github.svg"


def make_site(**overrides):
    data = {
        "id": 1,
        "logo": LOGO,
        "url": "https://github.com",
        "name": "GitHub",
        "description": "Code hosting",
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def fetch_result(row):
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    return result


class TestLogoPath:

    @pytest.mark.parametrize(
        "logo",
        [LOGO, "/uploads/svg/a.svg", "/uploads/svg/nested/dir/logo.svg"],
    )
    def test_accepts_upload_paths(self, logo):
        assert is_valid_logo_path(logo)

    @pytest.mark.parametrize(
        "logo",
        [
            "uploads/svg/a.svg",
            "/uploads/png/a.svg",
            "/uploads/svg/a.png",
            "/uploads/svg/a.SVG",
            "https://example.com/uploads/svg/a.svg",
            "/uploads/svg/a.svg?v=1",
        ],
    )
    def test_rejects_anything_else(self, logo):
        assert not is_valid_logo_path(logo)


class TestPatch:
    """NavigationSiteUpdate.to_patch() and the assignment builder."""

    def test_empty_body_sets_nothing(self):
        patch = NavigationSiteUpdate.model_validate({}).to_patch()
        assert patch.is_empty()
        assert patch.assignments() == {}

    def test_empty_description_is_set(self):
        patch = NavigationSiteUpdate.model_validate({"description": ""}).to_patch()
        assert patch.assignments() == {"description": ""}

    def test_null_description_is_set(self):
        patch = NavigationSiteUpdate.model_validate({"description": None}).to_patch()
        assert patch.assignments() == {"description": None}

    def test_empty_strings_for_other_fields_are_ignored(self):
        patch = NavigationSiteUpdate.model_validate(
            {"logo": "", "url": "", "name": ""}
        ).to_patch()
        assert patch.is_empty()

    def test_only_supplied_fields_are_assigned(self):
        patch = NavigationSiteUpdate.model_validate(
            {"name": "GitLab", "url": "https://gitlab.com"}
        ).to_patch()
        assert patch.assignments() == {"url": "https://gitlab.com", "name": "GitLab"}
        assert patch.logo is UNSET
        assert patch.description is UNSET

    def test_unset_is_falsy_singleton(self):
        assert not UNSET
        assert NavigationSitePatch().logo is UNSET
        assert repr(UNSET) == "UNSET"


class TestNavigationServiceCreate:

    def setup_method(self):
        self.service = NavigationService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"url": "http://x", "name": "X"},
            {"logo": LOGO, "name": "X"},
            {"logo": LOGO, "url": "http://x"},
            {"logo": "", "url": "http://x", "name": "X"},
        ],
    )
    async def test_missing_required_field(self, mock_db_session, body):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_site(mock_db_session, NavigationSiteCreate(**body))
        assert exc_info.value.message == "logo、url和name为必填字段"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_logo(self, mock_db_session):
        body = NavigationSiteCreate(logo="/static/logo.png", url="http://x", name="X")
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_site(mock_db_session, body)
        assert exc_info.value.message == "logo必须是有效的SVG文件路径"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_returns_record_with_id(self, mock_db_session):
        def assign_id():
            mock_db_session.add.call_args[0][0].id = 3

        mock_db_session.commit = AsyncMock(side_effect=assign_id)
        body = NavigationSiteCreate(logo=LOGO, url="https://github.com", name="GitHub")

        site = await self.service.create_site(mock_db_session, body)

        assert site.id == 3
        assert site.logo == LOGO
        assert site.description is None
        assert "description" not in site.model_fields_set

    @pytest.mark.asyncio
    @pytest.mark.parametrize("description", ["Code hosting", "", None])
    async def test_create_echoes_supplied_description(self, mock_db_session, description):
        def assign_id():
            mock_db_session.add.call_args[0][0].id = 4

        mock_db_session.commit = AsyncMock(side_effect=assign_id)
        body = NavigationSiteCreate(
            logo=LOGO, url="https://github.com", name="GitHub", description=description
        )

        site = await self.service.create_site(mock_db_session, body)

        assert site.description == description
        assert "description" in site.model_fields_set

    @pytest.mark.asyncio
    async def test_create_db_failure(self, mock_db_session):
        mock_db_session.commit = AsyncMock(side_effect=RuntimeError("disk I/O error"))
        body = NavigationSiteCreate(logo=LOGO, url="https://github.com", name="GitHub")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_site(mock_db_session, body)
        assert exc_info.value.message == "创建导航站点失败"


class TestNavigationServiceUpdate:

    def setup_method(self):
        self.service = NavigationService()

    @pytest.mark.asyncio
    async def test_update_missing_site(self, mock_db_session):
        mock_db_session.execute = AsyncMock(return_value=fetch_result(None))

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.update_site(mock_db_session, 9, NavigationSitePatch(name="X"))
        assert exc_info.value.message == "导航站点不存在"

    @pytest.mark.asyncio
    async def test_update_invalid_logo(self, mock_db_session):
        mock_db_session.execute = AsyncMock(return_value=fetch_result(make_site()))

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_site(
                mock_db_session, 1, NavigationSitePatch(logo="/uploads/svg/logo.png")
            )
        assert exc_info.value.message == "logo必须是有效的SVG文件路径"
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_update_with_nothing_to_change(self, mock_db_session):
        """Empty patch: 400 and no UPDATE statement issued."""
        mock_db_session.execute = AsyncMock(return_value=fetch_result(make_site()))

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_site(mock_db_session, 1, NavigationSitePatch())
        assert exc_info.value.message == "没有提供要更新的字段"
        assert mock_db_session.execute.await_count == 1
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_row_vanished(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=[fetch_result(make_site()), MagicMock(rowcount=0)]
        )

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.update_site(mock_db_session, 1, NavigationSitePatch(name="X"))
        assert exc_info.value.message == "更新失败，导航站点不存在"

    @pytest.mark.asyncio
    async def test_update_returns_reread_row(self, mock_db_session):
        updated = make_site(description="")
        mock_db_session.execute = AsyncMock(
            side_effect=[
                fetch_result(make_site()),
                MagicMock(rowcount=1),
                fetch_result(updated),
            ]
        )

        site = await self.service.update_site(
            mock_db_session, 1, NavigationSitePatch(description="")
        )

        assert site.description == ""
        assert mock_db_session.execute.await_count == 3
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_db_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("deadlock"))

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.update_site(mock_db_session, 1, NavigationSitePatch(name="X"))
        assert exc_info.value.message == "更新导航站点失败"


class TestNavigationServiceDelete:

    def setup_method(self):
        self.service = NavigationService()

    @pytest.mark.asyncio
    async def test_delete_success(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=1)
        assert await self.service.delete_site(mock_db_session, 1) == "导航站点删除成功"

    @pytest.mark.asyncio
    async def test_delete_missing(self, mock_db_session):
        mock_db_session.execute.return_value = MagicMock(rowcount=0)
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.delete_site(mock_db_session, 1)
        assert exc_info.value.message == "导航站点不存在"
