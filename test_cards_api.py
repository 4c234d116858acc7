import json
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.v1.boards import delete_board, get_board, get_boards, create_board
from src.api.v1.cards import (
    create_card,
    get_card,
    get_card_assignee,
    get_cards,
    move_card,
    reorder_cards,
    set_card_status,
    update_card_content,
)
from src.core.error_handlers import (
    cross_board_move_handler,
    not_found_handler,
    validation_error_handler,
)
from src.core.exceptions import CrossBoardMoveError, NotFoundError, ValidationError
from src.models.board import Board
from src.models.card import Card, CardStatus
from src.schemas.board import BoardCreate
from src.schemas.card import (
    CardContentUpdate,
    CardCreate,
    CardMove,
    CardOrderUpdate,
    CardStatusUpdate,
)
from src.services.collaborators import MemberInfo


@pytest.fixture
def mock_db():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def mock_card():
    card = MagicMock(spec=Card)
    card.id = 1
    card.title = "Book venue"
    card.list_id = 1
    card.position = 1
    return card


@pytest.fixture
def mock_request():
    request = MagicMock()
    request.method = "PUT"
    request.url.path = "/api/v1/cards/1/move"
    return request


class TestCardEndpoints:
    """Тесты для эндпоинтов карточек"""

    @pytest.mark.asyncio
    async def test_create_card(self, mock_db, mock_card):
        """Успешное создание карточки"""
        with patch('src.api.v1.cards.CardService.create', return_value=mock_card) as mock_create:
            result = await create_card(1, CardCreate(title="Book venue", position=2), mock_db)

            mock_create.assert_called_once_with(
                db=mock_db,
                title="Book venue",
                list_id=1,
                position=2,
                description=""
            )
            assert result == mock_card

    @pytest.mark.asyncio
    async def test_get_cards(self, mock_db, mock_card):
        with patch('src.api.v1.cards.CardService.get_by_list_id', return_value=[mock_card]) as mock_get:
            result = await get_cards(1, mock_db)

            mock_get.assert_called_once_with(db=mock_db, list_id=1)
            assert result == {"cards": [mock_card]}

    @pytest.mark.asyncio
    async def test_reorder_cards(self, mock_db, mock_card):
        with patch('src.api.v1.cards.CardService.reorder_cards', return_value=[mock_card]) as mock_reorder:
            result = await reorder_cards(1, CardOrderUpdate(card_order=[1]), mock_db)

            mock_reorder.assert_called_once_with(db=mock_db, list_id=1, card_order=[1])
            assert result == {"cards": [mock_card]}

    @pytest.mark.asyncio
    async def test_get_card_not_found(self, mock_db):
        """Ошибка при несуществующей карточке"""
        with patch('src.api.v1.cards.CardService.get_by_id', return_value=None):
            with pytest.raises(HTTPException) as exc_info:
                await get_card(999, mock_db)

            assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND
            assert "Card not found" in str(exc_info.value.detail)

    @pytest.mark.asyncio
    async def test_update_card_content(self, mock_db, mock_card):
        with patch('src.api.v1.cards.CardService.update_content', return_value=mock_card) as mock_update:
            result = await update_card_content(
                1, CardContentUpdate(title="Book hall", description="Deposit paid"), mock_db
            )

            mock_update.assert_called_once_with(
                db=mock_db, card_id=1, title="Book hall", description="Deposit paid"
            )
            assert result == mock_card

    @pytest.mark.asyncio
    async def test_move_card_uses_board_setting(self, mock_db, mock_card):
        """Проверка доски при перемещении берется из настроек"""
        settings = MagicMock()
        settings.ENFORCE_SAME_BOARD_MOVES = True

        with patch('src.api.v1.cards.get_settings', return_value=settings), \
             patch('src.api.v1.cards.CardService.move_card', return_value=mock_card) as mock_move:

            result = await move_card(1, CardMove(list_id=2, position=1), mock_db)

            mock_move.assert_called_once_with(
                db=mock_db,
                card_id=1,
                new_list_id=2,
                new_position=1,
                enforce_same_board=True
            )
            assert result == mock_card

    @pytest.mark.asyncio
    async def test_set_card_status(self, mock_db, mock_card):
        with patch('src.api.v1.cards.CardService.set_status', return_value=mock_card) as mock_set:
            await set_card_status(1, CardStatusUpdate(status="in_progress"), mock_db)

            mock_set.assert_called_once_with(db=mock_db, card_id=1, status=CardStatus.IN_PROGRESS)

    @pytest.mark.asyncio
    async def test_assignee_without_directory(self, mock_db):
        """Без каталога участников информация недоступна"""
        with pytest.raises(HTTPException) as exc_info:
            await get_card_assignee(1, mock_db, None)

        assert exc_info.value.status_code == status.HTTP_503_SERVICE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_assignee_with_directory(self, mock_db):
        directory = MagicMock()
        member = MemberInfo(id="u1", display_name="Ana Silva")

        with patch('src.api.v1.cards.CardService.resolve_assignee', return_value=member) as mock_resolve:
            result = await get_card_assignee(1, mock_db, directory)

            mock_resolve.assert_called_once_with(db=mock_db, card_id=1, member_directory=directory)
            assert result == member


class TestBoardEndpoints:
    """Тесты для эндпоинтов досок"""

    @pytest.mark.asyncio
    async def test_create_board(self, mock_db):
        board = MagicMock(spec=Board)
        with patch('src.api.v1.boards.BoardService.create', return_value=board) as mock_create:
            result = await create_board(BoardCreate(name="Spring Concert"), mock_db)

            mock_create.assert_called_once_with(db=mock_db, name="Spring Concert", description="")
            assert result == board

    @pytest.mark.asyncio
    async def test_get_boards_caps_page_size(self, mock_db):
        """Размер страницы ограничен настройкой MAX_PAGE_SIZE"""
        settings = MagicMock()
        settings.DEFAULT_PAGE_SIZE = 10
        settings.MAX_PAGE_SIZE = 100

        with patch('src.api.v1.boards.get_settings', return_value=settings), \
             patch('src.api.v1.boards.BoardService.get_boards_paged', return_value=([], 0)) as mock_paged:

            result = await get_boards(page=2, page_size=500, search="concert", db=mock_db)

            mock_paged.assert_called_once_with(db=mock_db, page=2, page_size=100, search_term="concert")
            assert result == {"boards": [], "total": 0, "page": 2, "page_size": 100}

    @pytest.mark.asyncio
    async def test_get_boards_default_page_size(self, mock_db):
        settings = MagicMock()
        settings.DEFAULT_PAGE_SIZE = 10
        settings.MAX_PAGE_SIZE = 100

        with patch('src.api.v1.boards.get_settings', return_value=settings), \
             patch('src.api.v1.boards.BoardService.get_boards_paged', return_value=([], 0)) as mock_paged:

            await get_boards(page=1, page_size=None, search=None, db=mock_db)

            mock_paged.assert_called_once_with(db=mock_db, page=1, page_size=10, search_term=None)

    @pytest.mark.asyncio
    async def test_get_board_not_found(self, mock_db):
        with patch('src.api.v1.boards.BoardService.get_complete_board', return_value=None):
            with pytest.raises(HTTPException) as exc_info:
                await get_board(1, mock_db)

            assert exc_info.value.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_board(self, mock_db):
        with patch('src.api.v1.boards.BoardService.delete') as mock_delete:
            await delete_board(1, mock_db)

            mock_delete.assert_called_once_with(db=mock_db, board_id=1)


class TestErrorHandlers:
    """Тесты для преобразования ошибок домена в HTTP ответы"""

    @pytest.mark.asyncio
    async def test_not_found(self, mock_request):
        response = await not_found_handler(mock_request, NotFoundError("Card", 7))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert json.loads(response.body) == {"detail": "Card with ID 7 not found"}

    @pytest.mark.asyncio
    async def test_validation_error(self, mock_request):
        response = await validation_error_handler(mock_request, ValidationError("Position must be a positive integer, got 0"))

        assert response.status_code == 422
        assert "Position" in json.loads(response.body)["detail"]

    @pytest.mark.asyncio
    async def test_cross_board_move(self, mock_request):
        response = await cross_board_move_handler(mock_request, CrossBoardMoveError(1, 2, 3))

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "board 3" in json.loads(response.body)["detail"]
