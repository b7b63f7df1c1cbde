from enum import Enum
from typing import Dict, List

from walletbot.core.config import get_settings
from walletbot.services.reports.formatter import ReportFormatter
from .base_flow import BaseFlow, FlowOutcome, Step
from .validators import FlowValidators

settings = get_settings()


class AddCardStep(str, Enum):
    NUMBER = "awaiting_card_number"
    AMOUNT = "awaiting_card_amount"


class AddCardFlow(BaseFlow):
    """
    Creates a card for the signed in user (context: user_id) with empty
    limits, plans and wishes.
    """

    name = "add_card"
    steps_enum = AddCardStep
    progress_message = "⏳ Adding card..."

    def build_steps(self) -> List[Step]:
        return [
            Step(AddCardStep.NUMBER, "card_number", FlowValidators.validate_card_number,
                 "💳 Please enter the *card number* (16 digits):", next_step=AddCardStep.AMOUNT),
            Step(AddCardStep.AMOUNT, "amount", FlowValidators.validate_non_negative_amount,
                 f"💰 Enter the *initial balance* (in {settings.CURRENCY_SYMBOL}):"),
        ]

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        result = await self.api.add_card(data["user_id"], data["card_number"], data["amount"])
        if not result.ok:
            return self.create_failure("add card", result.error_message)

        masked = f"**** {data['card_number'][-4:]}"
        return FlowOutcome(
            True,
            f"✅ Card {masked} added successfully with balance {ReportFormatter.money(data['amount'])}!",
        )
