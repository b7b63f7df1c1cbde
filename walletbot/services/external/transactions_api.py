import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from pydantic import ValidationError

from walletbot.models.finance import Transaction
from .base_client import BaseClient
from .result import ApiResult

logger = logging.getLogger(__name__)

class TransactionsApi(BaseClient):
    """
    Client for card transactions.
    Single responsibility: transaction queries and inserts.
    """

    async def get_card_transactions(self, card_id: str) -> ApiResult[List[Transaction]]:
        """All transactions of a card, newest first."""
        result = await self._list_transactions({"cardId": card_id})
        if result.ok:
            result.value.sort(key=lambda tx: tx.date, reverse=True)
        return result

    async def get_scheduled_transactions(self, card_id: str) -> ApiResult[List[Transaction]]:
        """Future dated transactions not applied to the balance, oldest first."""
        result = await self._list_transactions({"cardId": card_id, "scheduled": "true"})
        if result.ok:
            scheduled = sorted((tx for tx in result.value if tx.scheduled), key=lambda tx: tx.date)
            return ApiResult.success(scheduled)
        return result

    async def get_current_transactions(self, card_id: str) -> ApiResult[List[Transaction]]:
        """Transactions already applied to the balance, newest first."""
        result = await self._list_transactions({"cardId": card_id, "isAffect": "true"})
        if result.ok:
            current = sorted((tx for tx in result.value if tx.is_affect), key=lambda tx: tx.date, reverse=True)
            return ApiResult.success(current)
        return result

    async def _list_transactions(self, params: Dict[str, str]) -> ApiResult[List[Transaction]]:
        try:
            response = await self._make_request("GET", "transactions", params=params)

            if response.status_code == 200:
                items = self._extract_data(response) or []
                transactions = [Transaction.model_validate(item) for item in items]
                logger.debug(f"[TRANSACTIONS] {len(transactions)} transactions for {params}")
                return ApiResult.success(transactions)
            elif response.status_code == 404:
                return ApiResult.success([])
            else:
                return ApiResult.failure(self._extract_error(response))

        except ValidationError as e:
            logger.error(f"[TRANSACTIONS] Malformed transaction payload: {e}")
            return ApiResult.failure("Malformed transaction data")
        except Exception as e:
            logger.error(f"[TRANSACTIONS] Error listing transactions: {e}")
            return ApiResult.failure(str(e))

    async def add_transaction(self, transaction: Transaction) -> ApiResult[Optional[str]]:
        """
        Stores a transaction document. Balance changes are not done here.

        Returns:
            ApiResult with the new transaction id
        """
        try:
            payload = transaction.model_dump(
                mode="json",
                by_alias=True,
                exclude={"id", "card_number"},
            )
            payload["createdAt"] = datetime.now(timezone.utc).isoformat()

            response = await self._make_request("POST", "transactions", json=payload)

            if response.status_code in [200, 201]:
                tx_id = (self._extract_data(response) or {}).get("id")
                logger.info(f"[TRANSACTIONS] Transaction created: {tx_id} (scheduled={transaction.scheduled})")
                return ApiResult.success(tx_id)
            else:
                return ApiResult.failure(self._extract_error(response))

        except Exception as e:
            logger.error(f"[TRANSACTIONS] Error adding transaction: {e}")
            return ApiResult.failure(str(e))
