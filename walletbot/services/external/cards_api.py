import logging
from datetime import datetime, timezone
from typing import Any, Dict, List
from pydantic import ValidationError

from walletbot.core.errors import NotFoundError
from walletbot.models.finance import Card, MonthlyAmount, Wish, upsert_monthly_amount
from .base_client import BaseClient
from .result import ApiResult

logger = logging.getLogger(__name__)

class CardsApi(BaseClient):
    """
    Client for cards and the lists embedded in them (limits, plans, wishes).
    Single responsibility: card operations.
    """

    async def get_user_cards(self, user_id: str) -> ApiResult[List[Card]]:
        """
        Lists the cards owned by a user.

        Args:
            user_id: Identity provider uid

        Returns:
            ApiResult with the (possibly empty) list of cards
        """
        try:
            response = await self._make_request("GET", "cards", params={"user_id": user_id})

            if response.status_code == 200:
                cards = [Card.model_validate(item) for item in self._extract_data(response) or []]
                logger.debug(f"[CARDS] {len(cards)} cards found for user {user_id}")
                return ApiResult.success(cards)
            elif response.status_code == 404:
                return ApiResult.success([])
            else:
                return ApiResult.failure(self._extract_error(response))

        except ValidationError as e:
            logger.error(f"[CARDS] Malformed card payload: {e}")
            return ApiResult.failure("Malformed card data")
        except Exception as e:
            logger.error(f"[CARDS] Error listing cards: {e}")
            return ApiResult.failure(str(e))

    async def get_card_by_id(self, card_id: str) -> ApiResult[Card]:
        """
        Fetches one card.

        Returns:
            ApiResult with the card, or a NotFoundError failure
        """
        try:
            response = await self._make_request("GET", f"cards/{card_id}")

            if response.status_code == 200:
                data = self._extract_data(response)
                if not data:
                    return ApiResult.failure("Card not found", NotFoundError)
                return ApiResult.success(Card.model_validate(data))
            elif response.status_code == 404:
                logger.debug(f"[CARDS] Card {card_id} not found")
                return ApiResult.failure("Card not found", NotFoundError)
            else:
                return ApiResult.failure(self._extract_error(response))

        except ValidationError as e:
            logger.error(f"[CARDS] Malformed card payload: {e}")
            return ApiResult.failure("Malformed card data")
        except Exception as e:
            logger.error(f"[CARDS] Error getting card {card_id}: {e}")
            return ApiResult.failure(str(e))

    async def add_card(self, user_id: str, card_number: str, amount: float) -> ApiResult[str]:
        """
        Creates a card with empty limits, plans and wishes.

        Returns:
            ApiResult with the new card id
        """
        try:
            payload = {
                "card_number": card_number,
                "current_amount": float(amount),
                "user_id": user_id,
                "limits": [],
                "plans": [],
                "wishes": [],
                "createdAt": datetime.now(timezone.utc).isoformat(),
            }
            response = await self._make_request("POST", "cards", json=payload)

            if response.status_code in [200, 201]:
                card_id = (self._extract_data(response) or {}).get("id")
                logger.info(f"[CARDS] Card created: {card_id}")
                return ApiResult.success(card_id)
            else:
                return ApiResult.failure(self._extract_error(response))

        except Exception as e:
            logger.error(f"[CARDS] Error adding card: {e}")
            return ApiResult.failure(str(e))

    async def update_card(self, card_id: str, fields: Dict[str, Any]) -> ApiResult[None]:
        """Partially updates a card document."""
        try:
            response = await self._make_request("PATCH", f"cards/{card_id}", json=fields)

            if response.status_code in [200, 204]:
                logger.debug(f"[CARDS] Card {card_id} updated: {list(fields)}")
                return ApiResult.success()
            elif response.status_code == 404:
                return ApiResult.failure("Card not found", NotFoundError)
            else:
                return ApiResult.failure(self._extract_error(response))

        except Exception as e:
            logger.error(f"[CARDS] Error updating card {card_id}: {e}")
            return ApiResult.failure(str(e))

    async def add_card_limit(self, card_id: str, month: str, amount: float) -> ApiResult[None]:
        """Sets the spending limit of a month, replacing an existing one."""
        return await self._upsert_monthly(card_id, "limits", month, amount)

    async def add_card_plan(self, card_id: str, month: str, amount: float) -> ApiResult[None]:
        """Sets the minimum balance goal of a month, replacing an existing one."""
        return await self._upsert_monthly(card_id, "plans", month, amount)

    async def _upsert_monthly(self, card_id: str, list_name: str, month: str, amount: float) -> ApiResult[None]:
        card_result = await self.get_card_by_id(card_id)
        if not card_result.ok:
            return ApiResult(error=card_result.error)

        entries: List[MonthlyAmount] = getattr(card_result.value, list_name)
        updated = upsert_monthly_amount(entries, month, amount)
        logger.info(f"[CARDS] {list_name} of card {card_id}: {month} -> {float(amount)}")

        return await self.update_card(card_id, {list_name: [entry.model_dump() for entry in updated]})

    async def add_card_wish(self, card_id: str, name: str, target_amount: float) -> ApiResult[None]:
        """Appends a wish. Wishes with the same name are kept side by side."""
        card_result = await self.get_card_by_id(card_id)
        if not card_result.ok:
            return ApiResult(error=card_result.error)

        wishes = list(card_result.value.wishes)
        wishes.append(Wish(
            name=name,
            target_amount=float(target_amount),
            created_at=datetime.now(timezone.utc).isoformat(),
        ))
        return await self.update_card(card_id, {"wishes": [wish.model_dump(by_alias=True) for wish in wishes]})

    async def apply_balance_delta(self, card_id: str, delta: float) -> ApiResult[float]:
        """
        Adds `delta` to the card balance.

        Returns:
            ApiResult with the new balance
        """
        card_result = await self.get_card_by_id(card_id)
        if not card_result.ok:
            return ApiResult(error=card_result.error)

        new_amount = card_result.value.current_amount + delta
        update_result = await self.update_card(card_id, {"current_amount": new_amount})
        if not update_result.ok:
            return ApiResult(error=update_result.error)

        logger.info(f"[CARDS] Balance of card {card_id}: {card_result.value.current_amount} -> {new_amount}")
        return ApiResult.success(new_amount)
