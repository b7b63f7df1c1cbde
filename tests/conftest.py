"""Shared test doubles for the conversation layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from walletbot.core.errors import NotFoundError
from walletbot.models.finance import Card, Transaction
from walletbot.models.session import Session
from walletbot.services.conversation import ConversationManager
from walletbot.services.external.result import ApiResult
from walletbot.services.messaging import Messenger


class RecordingMessenger(Messenger):
    """Messenger test double that records outbound messages."""

    def __init__(self) -> None:
        self.sent: List[tuple] = []

    async def send(self, conversation_id: str, content: Any) -> None:
        self.sent.append((conversation_id, content))

    @property
    def last(self) -> Any:
        return self.sent[-1][1] if self.sent else None

    def texts(self) -> List[str]:
        return [content for _, content in self.sent if isinstance(content, str)]

    def reset(self) -> None:
        self.sent.clear()


class StubFinanceApi:
    """FinanceApi test double: in-memory cards and transactions, every call recorded."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.cards: Dict[str, Card] = {}
        self.transactions: Dict[str, List[Transaction]] = {}
        self.write_error: Optional[str] = None
        self.raise_on_write: Optional[Exception] = None
        self.auth_error: Optional[str] = None

    def give_card(self, card_id: str, number: str, balance: float = 0.0, user_id: str = "uid-1", **extra) -> Card:
        card = Card(id=card_id, card_number=number, current_amount=balance, user_id=user_id, **extra)
        self.cards[card_id] = card
        return card

    def _write(self, name: str, *args, value: Any = None) -> ApiResult:
        self.calls.append((name, *args))
        if self.raise_on_write:
            raise self.raise_on_write
        if self.write_error:
            return ApiResult.failure(self.write_error)
        return ApiResult.success(value)

    async def sign_in(self, email: str, password: str):
        self.calls.append(("sign_in", email, password))
        if self.auth_error:
            return ApiResult.failure(self.auth_error)
        return ApiResult.success(Session(subject_id="uid-1", email=email, display_name="Ana"))

    async def sign_up(self, email: str, password: str, name: str, surname: str):
        self.calls.append(("sign_up", email, password, name, surname))
        if self.auth_error:
            return ApiResult.failure(self.auth_error)
        return ApiResult.success(Session(subject_id="uid-2", email=email, display_name=name, surname=surname))

    async def get_user_cards(self, user_id: str):
        return ApiResult.success([card for card in self.cards.values() if card.user_id == user_id])

    async def get_card_by_id(self, card_id: str):
        card = self.cards.get(card_id)
        if card is None:
            return ApiResult.failure("Card not found", NotFoundError)
        return ApiResult.success(card)

    async def add_card(self, user_id: str, card_number: str, amount: float):
        return self._write("add_card", user_id, card_number, amount, value="card-new")

    async def add_card_limit(self, card_id: str, month: str, amount: float):
        return self._write("add_card_limit", card_id, month, amount)

    async def add_card_plan(self, card_id: str, month: str, amount: float):
        return self._write("add_card_plan", card_id, month, amount)

    async def add_card_wish(self, card_id: str, name: str, target_amount: float):
        return self._write("add_card_wish", card_id, name, target_amount)

    async def add_transaction(self, **fields):
        return self._write("add_transaction", fields, value="tx-new")

    async def get_card_transactions(self, card_id: str):
        return ApiResult.success(list(self.transactions.get(card_id, [])))

    async def get_scheduled_transactions(self, card_id: str):
        return ApiResult.success([tx for tx in self.transactions.get(card_id, []) if tx.scheduled])

    async def get_current_transactions(self, card_id: str):
        return ApiResult.success([tx for tx in self.transactions.get(card_id, []) if tx.is_affect])

    async def get_all_user_transactions(self, user_id: str):
        return ApiResult.success([tx for txs in self.transactions.values() for tx in txs])

    async def close(self) -> None:
        self.calls.append(("close",))


@pytest.fixture
def messenger() -> RecordingMessenger:
    return RecordingMessenger()


@pytest.fixture
def api() -> StubFinanceApi:
    return StubFinanceApi()


@pytest.fixture
def manager(api, messenger) -> ConversationManager:
    return ConversationManager(api=api, messenger=messenger)


@pytest.fixture
def logged_in(manager) -> Session:
    """Signs conversation "chat-1" in as uid-1."""
    return manager.sessions.set("chat-1", Session(subject_id="uid-1", email="ana@example.com", display_name="Ana"))
