import re
import logging
from enum import Enum
from typing import Optional

from walletbot.core.errors import NotFoundError
from walletbot.models.finance import Card
from walletbot.services.messaging import Messenger
from walletbot.services.reports.formatter import ReportFormatter

logger = logging.getLogger(__name__)


class CardView(str, Enum):
    """Read-only card views; the value is the prefix of their list reply ids."""
    TRANSACTIONS = "view_tx_"
    SCHEDULED = "scheduled_"
    CURRENT = "current_"


class ButtonHandler:
    """
    Single responsibility: answer the card view list replies.

    These replies carry the card id themselves, so they are handled without
    any conversation state and never touch a pending flow.
    """

    BUTTON_PATTERNS = [re.compile(rf'^{view.value}[\w-]+$') for view in CardView]

    def __init__(self, api, messenger: Messenger):
        self.api = api
        self.messenger = messenger
        self._fetchers = {
            CardView.TRANSACTIONS: (api.get_card_transactions, ReportFormatter.transactions),
            CardView.SCHEDULED: (api.get_scheduled_transactions, ReportFormatter.scheduled),
            CardView.CURRENT: (api.get_current_transactions, ReportFormatter.current),
        }

    def is_button_id(self, message: str) -> bool:
        if not message:
            return False
        message = message.strip()
        return any(pattern.match(message) for pattern in self.BUTTON_PATTERNS)

    @staticmethod
    def parse_button_id(button_id: str) -> Optional[tuple]:
        """Splits a reply id into (CardView, card_id)."""
        button_id = button_id.strip()
        for view in CardView:
            if button_id.startswith(view.value):
                return view, button_id[len(view.value):]
        return None

    async def handle_button(self, conversation_id: str, button_id: str) -> None:
        """
        Shows the view a list reply asks for.

        Raises:
            NotFoundError: The card does not exist (anymore)
        """
        parsed = self.parse_button_id(button_id)
        if parsed is None:
            return
        view, card_id = parsed
        logger.debug(f"[BUTTON_HANDLER] {view.name} for card {card_id}")

        card_result = await self.api.get_card_by_id(card_id)
        if not card_result.ok:
            if isinstance(card_result.error, NotFoundError):
                raise card_result.error
            await self.messenger.send(conversation_id, f"❌ Failed to load card: {card_result.error_message}")
            return

        await self.show_view(conversation_id, view, card_result.value)

    async def show_view(self, conversation_id: str, view: CardView, card: Card) -> None:
        fetch, render = self._fetchers[view]
        result = await fetch(card.id)
        if not result.ok:
            await self.messenger.send(conversation_id, f"❌ Failed to load transactions: {result.error_message}")
            return
        await self.messenger.send(conversation_id, render(card, result.value))
