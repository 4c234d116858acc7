import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.v1.lists import (
    check_list_in_board,
    create_list,
    delete_list,
    get_lists,
    rename_list,
    reorder_lists,
    update_list_position,
)
from src.core.exceptions import NotFoundError, ValidationError
from src.models.board_list import BoardList
from src.schemas.board_list import (
    BoardListCreate,
    BoardListOrderUpdate,
    BoardListPositionUpdate,
    BoardListRename,
)


@pytest.fixture
def mock_db():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def mock_list():
    board_list = MagicMock(spec=BoardList)
    board_list.id = 1
    board_list.name = "To Do"
    board_list.board_id = 1
    board_list.position = 1
    return board_list


class TestCheckListInBoard:
    """Тесты для функции check_list_in_board"""

    @pytest.mark.asyncio
    async def test_list_of_board(self, mock_db, mock_list):
        """Список принадлежит доске из пути"""
        with patch('src.api.v1.lists.ListService.get_by_id', return_value=mock_list) as mock_get:
            result = await check_list_in_board(1, 1, mock_db)

            mock_get.assert_called_once_with(db=mock_db, list_id=1)
            assert result == mock_list

    @pytest.mark.asyncio
    async def test_list_not_found(self, mock_db):
        """Ошибка при несуществующем списке"""
        with patch('src.api.v1.lists.ListService.get_by_id', return_value=None):
            with pytest.raises(HTTPException) as exc_info:
                await check_list_in_board(1, 999, mock_db)

            assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
            assert "List not found" in str(exc_info.value.detail)

    @pytest.mark.asyncio
    async def test_list_of_other_board(self, mock_db, mock_list):
        """Ошибка при принадлежности списка другой доске"""
        mock_list.board_id = 2  # Другая доска

        with patch('src.api.v1.lists.ListService.get_by_id', return_value=mock_list):
            with pytest.raises(HTTPException) as exc_info:
                await check_list_in_board(1, 1, mock_db)

            assert exc_info.value.status_code == status.HTTP_400_BAD_REQUEST
            assert "List does not belong to the specified board" in str(exc_info.value.detail)


class TestListEndpoints:
    """Тесты для эндпоинтов списков"""

    @pytest.mark.asyncio
    async def test_create_list(self, mock_db, mock_list):
        """Успешное создание списка"""
        with patch('src.api.v1.lists.ListService.create', return_value=mock_list) as mock_create:
            result = await create_list(1, BoardListCreate(name="To Do", position=1), mock_db)

            mock_create.assert_called_once_with(db=mock_db, name="To Do", board_id=1, position=1)
            assert result == mock_list

    @pytest.mark.asyncio
    async def test_create_list_without_position(self, mock_db, mock_list):
        """Без позиции список добавляется в конец"""
        with patch('src.api.v1.lists.ListService.create', return_value=mock_list) as mock_create:
            await create_list(1, BoardListCreate(name="To Do"), mock_db)

            mock_create.assert_called_once_with(db=mock_db, name="To Do", board_id=1, position=None)

    @pytest.mark.asyncio
    async def test_create_list_missing_board(self, mock_db):
        """Ошибка домена пробрасывается до обработчика приложения"""
        with patch('src.api.v1.lists.ListService.create', side_effect=NotFoundError("Board", 9)):
            with pytest.raises(NotFoundError):
                await create_list(9, BoardListCreate(name="To Do"), mock_db)

    @pytest.mark.asyncio
    async def test_get_lists(self, mock_db, mock_list):
        with patch('src.api.v1.lists.ListService.get_with_cards_by_board_id', return_value=[mock_list]) as mock_get:
            result = await get_lists(1, mock_db)

            mock_get.assert_called_once_with(db=mock_db, board_id=1)
            assert result == {"lists": [mock_list]}

    @pytest.mark.asyncio
    async def test_reorder_lists(self, mock_db, mock_list):
        """Успешное изменение порядка списков"""
        with patch('src.api.v1.lists.ListService.reorder_lists') as mock_reorder, \
             patch('src.api.v1.lists.ListService.get_with_cards_by_board_id', return_value=[mock_list]):

            result = await reorder_lists(1, BoardListOrderUpdate(list_order=[3, 1, 2]), mock_db)

            mock_reorder.assert_called_once_with(db=mock_db, board_id=1, list_order=[3, 1, 2])
            assert result == {"lists": [mock_list]}

    @pytest.mark.asyncio
    async def test_reorder_lists_incomplete_order(self, mock_db):
        with patch('src.api.v1.lists.ListService.reorder_lists', side_effect=ValidationError("bad order")):
            with pytest.raises(ValidationError):
                await reorder_lists(1, BoardListOrderUpdate(list_order=[1]), mock_db)

    @pytest.mark.asyncio
    async def test_rename_list(self, mock_db, mock_list):
        with patch('src.api.v1.lists.check_list_in_board') as mock_check, \
             patch('src.api.v1.lists.ListService.update_name', return_value=mock_list) as mock_update:

            result = await rename_list(1, 1, BoardListRename(name="Doing"), mock_db)

            mock_check.assert_called_once_with(1, 1, mock_db)
            mock_update.assert_called_once_with(db=mock_db, list_id=1, name="Doing")
            assert result == mock_list

    @pytest.mark.asyncio
    async def test_update_list_position(self, mock_db, mock_list):
        with patch('src.api.v1.lists.check_list_in_board'), \
             patch('src.api.v1.lists.ListService.update_position', return_value=mock_list) as mock_update:

            result = await update_list_position(1, 1, BoardListPositionUpdate(position=3), mock_db)

            mock_update.assert_called_once_with(db=mock_db, list_id=1, position=3)
            assert result == mock_list

    @pytest.mark.asyncio
    async def test_delete_list(self, mock_db):
        with patch('src.api.v1.lists.check_list_in_board') as mock_check, \
             patch('src.api.v1.lists.ListService.delete') as mock_delete:

            result = await delete_list(1, 1, mock_db)

            mock_check.assert_called_once_with(1, 1, mock_db)
            mock_delete.assert_called_once_with(db=mock_db, list_id=1)
            assert result is None

    @pytest.mark.asyncio
    async def test_delete_list_of_other_board(self, mock_db):
        """Список другой доски не удаляется"""
        with patch('src.api.v1.lists.check_list_in_board',
                   side_effect=HTTPException(status_code=400, detail="List does not belong to the specified board")), \
             patch('src.api.v1.lists.ListService.delete') as mock_delete:

            with pytest.raises(HTTPException) as exc_info:
                await delete_list(1, 1, mock_db)

            assert exc_info.value.status_code == 400
            mock_delete.assert_not_called()
