"""
Tests for category_service — create/update/delete with a mocked session.
"""

from unittest.mock import AsyncMock, patch

import pytest

from conftest import make_result
from storefront.database.models import Category
from storefront.services import category_service, slug_service
from storefront.services.exceptions import FieldValidationError
from storefront.utils.validation import SLUG_UNAVAILABLE_MESSAGE


def _existing_category(**overrides):
    fields = {"id": "c1", "name": "کفش", "slug": "کفش", "description": None, "is_active": True}
    fields.update(overrides)
    return Category(**fields)


class TestCreateCategory:
    @pytest.mark.asyncio
    async def test_creates_with_unique_slug(self, mock_session):
        mock_session.execute.return_value = make_result(scalars=["کفش-ورزشی"])

        result = await category_service.create_category(mock_session, " کفش ورزشی!! ", "راحت")

        assert result["name"] == "کفش ورزشی!!"
        assert result["slug"] == "کفش-ورزشی-2"
        assert result["description"] == "راحت"
        added = mock_session.add.call_args.args[0]
        assert isinstance(added, Category)
        assert added.is_active is True
        mock_session.commit.assert_awaited_once()
        mock_session.refresh.assert_awaited_once_with(added)

    @pytest.mark.asyncio
    async def test_invalid_name_writes_nothing(self, mock_session):
        with pytest.raises(FieldValidationError) as exc_info:
            await category_service.create_category(mock_session, "a")

        assert exc_info.value.field == "name"
        mock_session.add.assert_not_called()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_name_without_slug_characters(self, mock_session):
        with pytest.raises(FieldValidationError) as exc_info:
            await category_service.create_category(mock_session, "!!!")

        assert exc_info.value.message == SLUG_UNAVAILABLE_MESSAGE
        mock_session.add.assert_not_called()


class TestUpdateCategory:
    @pytest.mark.asyncio
    async def test_missing_category_returns_none(self, mock_session):
        with patch.object(category_service, "_get_active", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = None
            result = await category_service.update_category(mock_session, "missing", "کیف")

        assert result is None
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_same_name_keeps_slug(self, mock_session):
        existing = _existing_category()
        with patch.object(category_service, "_get_active", new_callable=AsyncMock) as mock_get, \
                patch.object(slug_service, "persist_with_unique_slug", new_callable=AsyncMock) as mock_persist:
            mock_get.return_value = existing
            await category_service.update_category(mock_session, "c1", "  کفش ", "جدید")

        mock_persist.assert_not_awaited()
        stmt = mock_session.execute.call_args.args[0]
        assert stmt.compile().params["slug"] == "کفش"
        assert stmt.compile().params["description"] == "جدید"
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rename_regenerates_slug(self, mock_session):
        existing = _existing_category()
        with patch.object(category_service, "_get_active", new_callable=AsyncMock) as mock_get, \
                patch.object(slug_service, "persist_with_unique_slug", new_callable=AsyncMock) as mock_persist:
            mock_get.return_value = existing
            await category_service.update_category(mock_session, "c1", "کیف دستی")

        args = mock_persist.await_args
        assert args.args[1] is Category
        assert args.args[2] == "کیف-دستی"
        assert args.kwargs["exclude_id"] == "c1"

    @pytest.mark.asyncio
    async def test_rename_without_slug_characters_keeps_old_slug(self, mock_session):
        existing = _existing_category()
        with patch.object(category_service, "_get_active", new_callable=AsyncMock) as mock_get, \
                patch.object(slug_service, "persist_with_unique_slug", new_callable=AsyncMock) as mock_persist:
            mock_get.return_value = existing
            await category_service.update_category(mock_session, "c1", "!!")

        mock_persist.assert_not_awaited()
        stmt = mock_session.execute.call_args.args[0]
        assert stmt.compile().params["slug"] == "کفش"
        assert stmt.compile().params["name"] == "!!"

    @pytest.mark.asyncio
    async def test_invalid_description(self, mock_session):
        with pytest.raises(FieldValidationError) as exc_info:
            await category_service.update_category(mock_session, "c1", "کفش", "x" * 501)

        assert exc_info.value.field == "description"
        mock_session.execute.assert_not_awaited()


class TestDeleteCategory:
    @pytest.mark.asyncio
    async def test_soft_delete(self, mock_session):
        mock_session.execute.return_value = make_result(rowcount=1)

        assert await category_service.delete_category(mock_session, "c1") is True
        stmt = mock_session.execute.call_args.args[0]
        assert stmt.compile().params["is_active"] is False
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_category(self, mock_session):
        mock_session.execute.return_value = make_result(rowcount=0)

        assert await category_service.delete_category(mock_session, "missing") is False


class TestReads:
    @pytest.mark.asyncio
    async def test_category_exists(self, mock_session):
        mock_session.execute.return_value = make_result(scalar="c1")
        assert await category_service.category_exists(mock_session, "c1") is True

        mock_session.execute.return_value = make_result(scalar=None)
        assert await category_service.category_exists(mock_session, "gone") is False

    @pytest.mark.asyncio
    async def test_list_categories_serializes_rows(self, mock_session):
        mock_session.execute.return_value = make_result(scalars=[_existing_category()])

        categories = await category_service.list_categories(mock_session)

        assert categories == [
            {
                "id": "c1",
                "name": "کفش",
                "slug": "کفش",
                "description": None,
                "created_at": None,
                "updated_at": None,
            }
        ]
