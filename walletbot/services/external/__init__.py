"""
External clients: the ledger API (cards, transactions, profiles) and the
identity provider. FinanceApi is the single entry point used by the bot.
"""

import logging
from typing import List, Optional

import httpx

from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.models.finance import Transaction, TransactionType
from walletbot.models.session import Session
from .base_client import LedgerApiError
from .result import ApiResult
from .auth_api import AuthApi
from .cards_api import CardsApi
from .transactions_api import TransactionsApi

logger = logging.getLogger(__name__)

__all__ = [
    "FinanceApi",
    "ApiResult",
    "LedgerApiError",
    "AuthApi",
    "CardsApi",
    "TransactionsApi",
]


class FinanceApi:
    """
    Unified interface over every external client.
    Composes the operations that span several documents (a transaction plus
    its balance update, transactions of all the user's cards).
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._auth = AuthApi(transport)
        self._cards = CardsApi(transport)
        self._transactions = TransactionsApi(transport)

    # ==================== AUTH ====================

    async def sign_in(self, email: str, password: str) -> ApiResult[Session]:
        return await self._auth.sign_in(email, password)

    async def sign_up(self, email: str, password: str, name: str, surname: str) -> ApiResult[Session]:
        return await self._auth.sign_up(email, password, name, surname)

    # ==================== CARDS ====================

    async def get_user_cards(self, user_id: str):
        return await self._cards.get_user_cards(user_id)

    async def get_card_by_id(self, card_id: str):
        return await self._cards.get_card_by_id(card_id)

    async def add_card(self, user_id: str, card_number: str, amount: float):
        return await self._cards.add_card(user_id, card_number, amount)

    async def add_card_limit(self, card_id: str, month: str, amount: float):
        return await self._cards.add_card_limit(card_id, month, amount)

    async def add_card_plan(self, card_id: str, month: str, amount: float):
        return await self._cards.add_card_plan(card_id, month, amount)

    async def add_card_wish(self, card_id: str, name: str, target_amount: float):
        return await self._cards.add_card_wish(card_id, name, target_amount)

    # ==================== TRANSACTIONS ====================

    async def get_card_transactions(self, card_id: str):
        return await self._transactions.get_card_transactions(card_id)

    async def get_scheduled_transactions(self, card_id: str):
        return await self._transactions.get_scheduled_transactions(card_id)

    async def get_current_transactions(self, card_id: str):
        return await self._transactions.get_current_transactions(card_id)

    async def add_transaction(
        self,
        card_id: str,
        title: str,
        tx_type: str,
        category: str,
        amount: float,
        date: str,
    ) -> ApiResult[Optional[str]]:
        """
        Stores a transaction and, when its date is not in the future, applies
        it to the card balance.

        Future dated transactions are stored as scheduled and leave the
        balance untouched.
        """
        scheduled = TimezoneHelper.is_future(date)
        transaction = Transaction(
            card_id=card_id,
            title=title,
            type=TransactionType(tx_type),
            category=category,
            amount=float(amount),
            date=date,
            scheduled=scheduled,
            is_affect=not scheduled,
            include_in_expected=True,
        )

        result = await self._transactions.add_transaction(transaction)
        if not result.ok:
            return result

        if transaction.is_affect:
            balance_result = await self._cards.apply_balance_delta(card_id, transaction.signed_amount)
            if not balance_result.ok:
                logger.error(f"[FINANCE] Transaction {result.value} stored but balance not updated: {balance_result.error_message}")
                return ApiResult.failure(f"Transaction saved but balance update failed: {balance_result.error_message}")

        return result

    async def get_all_user_transactions(self, user_id: str) -> ApiResult[List[Transaction]]:
        """Transactions of every card of the user, tagged with the card number, newest first."""
        cards_result = await self._cards.get_user_cards(user_id)
        if not cards_result.ok:
            return ApiResult(error=cards_result.error)

        all_transactions: List[Transaction] = []
        for card in cards_result.value:
            tx_result = await self._transactions.get_card_transactions(card.id)
            if not tx_result.ok:
                return tx_result
            all_transactions.extend(
                tx.model_copy(update={"card_id": card.id, "card_number": card.card_number})
                for tx in tx_result.value
            )

        all_transactions.sort(key=lambda tx: tx.date, reverse=True)
        return ApiResult.success(all_transactions)

    # ==================== RESOURCES ====================

    async def close(self):
        """Closes every HTTP client."""
        await self._auth.close()
        await self._cards.close()
        await self._transactions.close()
