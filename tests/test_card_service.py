"""
Card service unit tests (mocked session).

The ownership check must run before any DELETE statement is issued, and a
missing card must surface as NotFoundError for every card operation.
"""

import uuid
from unittest.mock import MagicMock

import pytest

from mesto.exceptions import AuthorizationError, NotFoundError
from mesto.schemas.card import CardCreate
from mesto.services.card_service import CardService


@pytest.fixture
def service():
    return CardService()


def _result_with(card):
    result = MagicMock()
    result.scalar_one_or_none.return_value = card
    return result


def _card(owner_id):
    card = MagicMock()
    card.id = uuid.uuid4()
    card.owner_id = owner_id
    return card


@pytest.mark.asyncio
async def test_non_owner_cannot_delete(service, mock_db_session):
    owner, intruder = uuid.uuid4(), uuid.uuid4()
    card = _card(owner)
    mock_db_session.execute.return_value = _result_with(card)

    with pytest.raises(AuthorizationError):
        await service.delete_card(mock_db_session, intruder, card.id)

    # Only the lookup ran; nothing was deleted
    assert mock_db_session.execute.await_count == 1


@pytest.mark.asyncio
async def test_owner_delete_issues_statements(service, mock_db_session):
    owner = uuid.uuid4()
    card = _card(owner)
    mock_db_session.execute.return_value = _result_with(card)

    result = await service.delete_card(mock_db_session, owner, card.id)

    assert result.message == "Card deleted"
    # lookup + likes + card
    assert mock_db_session.execute.await_count == 3


@pytest.mark.asyncio
async def test_delete_missing_card_is_not_found(service, mock_db_session):
    mock_db_session.execute.return_value = _result_with(None)

    with pytest.raises(NotFoundError):
        await service.delete_card(mock_db_session, uuid.uuid4(), uuid.uuid4())


@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["like_card", "unlike_card"])
async def test_like_missing_card_is_not_found(service, mock_db_session, operation):
    mock_db_session.execute.return_value = _result_with(None)

    with pytest.raises(NotFoundError):
        await getattr(service, operation)(mock_db_session, uuid.uuid4(), uuid.uuid4())
    mock_db_session.get_bind.assert_not_called()


@pytest.mark.asyncio
async def test_create_for_missing_owner_is_not_found(service, mock_db_session):
    mock_db_session.get.return_value = None
    payload = CardCreate(name="Архыз", link="https://example.com/arkhyz.jpg")

    with pytest.raises(NotFoundError):
        await service.create_card(mock_db_session, uuid.uuid4(), payload)
    mock_db_session.add.assert_not_called()
