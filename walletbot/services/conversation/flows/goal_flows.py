from enum import Enum
from typing import Dict, List

from walletbot.core.config import get_settings
from walletbot.services.reports.formatter import ReportFormatter
from .base_flow import CardScopedFlow, FlowOutcome, Step
from .validators import FlowValidators

settings = get_settings()

MONTH_PROMPT = "📅 Enter the month for the {kind} (YYYY-MM, e.g., 2026-01):"


class AddLimitStep(str, Enum):
    MONTH = "awaiting_limit_month"
    AMOUNT = "awaiting_limit_amount"


class AddPlanStep(str, Enum):
    MONTH = "awaiting_plan_month"
    AMOUNT = "awaiting_plan_amount"


class AddWishStep(str, Enum):
    NAME = "awaiting_wish_name"
    AMOUNT = "awaiting_wish_amount"


class AddLimitFlow(CardScopedFlow):
    """Monthly spending limit. A second limit for the same month replaces the first."""

    name = "add_limit"
    steps_enum = AddLimitStep
    progress_message = "⏳ Adding limit..."
    card_prompt_text = "💳 Select a card to add a limit:"

    def build_steps(self) -> List[Step]:
        return [
            Step(AddLimitStep.MONTH, "month", FlowValidators.validate_month,
                 MONTH_PROMPT.format(kind="limit"), next_step=AddLimitStep.AMOUNT),
            Step(AddLimitStep.AMOUNT, "amount", FlowValidators.validate_positive_amount,
                 f"💰 Enter the spending limit amount (in {settings.CURRENCY_SYMBOL}):"),
        ]

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        result = await self.api.add_card_limit(data["card_id"], data["month"], data["amount"])
        if not result.ok:
            return self.create_failure("add limit", result.error_message)
        return FlowOutcome(
            True,
            f"✅ Limit added!\n\n📅 Month: {data['month']}\n💰 Limit: {ReportFormatter.money(data['amount'])}",
        )


class AddPlanFlow(CardScopedFlow):
    """Monthly minimum balance goal, unique per month like limits."""

    name = "add_plan"
    steps_enum = AddPlanStep
    progress_message = "⏳ Adding plan..."
    card_prompt_text = "💳 Select a card to add a plan:"

    def build_steps(self) -> List[Step]:
        return [
            Step(AddPlanStep.MONTH, "month", FlowValidators.validate_month,
                 MONTH_PROMPT.format(kind="plan"), next_step=AddPlanStep.AMOUNT),
            Step(AddPlanStep.AMOUNT, "amount", FlowValidators.validate_non_negative_amount,
                 f"💰 Enter the minimum balance goal (in {settings.CURRENCY_SYMBOL}):"),
        ]

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        result = await self.api.add_card_plan(data["card_id"], data["month"], data["amount"])
        if not result.ok:
            return self.create_failure("add plan", result.error_message)
        return FlowOutcome(
            True,
            f"✅ Plan added!\n\n📅 Month: {data['month']}\n💰 Minimum Balance: {ReportFormatter.money(data['amount'])}",
        )


class AddWishFlow(CardScopedFlow):
    """Savings goal appended to the card's wishes."""

    name = "add_wish"
    steps_enum = AddWishStep
    progress_message = "⏳ Adding wish..."
    card_prompt_text = "💳 Select a card to add a wish:"

    def build_steps(self) -> List[Step]:
        return [
            Step(AddWishStep.NAME, "name", FlowValidators.validate_text,
                 "🌟 Enter a name for your wish (e.g., \"New Phone\", \"Vacation\"):", next_step=AddWishStep.AMOUNT),
            Step(AddWishStep.AMOUNT, "target_amount", FlowValidators.validate_positive_amount,
                 f"💰 Enter the target amount for your wish (in {settings.CURRENCY_SYMBOL}):"),
        ]

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        result = await self.api.add_card_wish(data["card_id"], data["name"], data["target_amount"])
        if not result.ok:
            return self.create_failure("add wish", result.error_message)
        return FlowOutcome(
            True,
            f"✅ Wish added!\n\n🌟 *{data['name']}*\n🎯 Target: {ReportFormatter.money(data['target_amount'])}\n\n"
            "Start saving to achieve your goal!",
        )
