from enum import Enum
from typing import Dict, List

from walletbot.core.config import get_settings
from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.models.finance import TransactionType
from walletbot.services.messaging import Content
from walletbot.services.reports.formatter import ReportFormatter
from walletbot.shared.whatsapp import WhatsAppHelper
from .base_flow import CardScopedFlow, FlowOutcome, Step
from .validators import FlowValidators

settings = get_settings()


class AddTransactionStep(str, Enum):
    TITLE = "awaiting_tx_title"
    TYPE = "awaiting_tx_type"
    CATEGORY = "awaiting_tx_category"
    AMOUNT = "awaiting_tx_amount"
    DATE = "awaiting_tx_date"


class AddTransactionFlow(CardScopedFlow):
    """
    Records a cost or an income on a card.

    Transactions dated today or earlier are applied to the balance at once;
    future dated ones are stored as scheduled.
    """

    name = "add_transaction"
    steps_enum = AddTransactionStep
    progress_message = "⏳ Adding transaction..."
    card_prompt_text = "💳 Select a card for this transaction:"

    def build_steps(self) -> List[Step]:
        return [
            Step(AddTransactionStep.TITLE, "title", FlowValidators.validate_text,
                 "📝 Enter transaction *title*:", next_step=AddTransactionStep.TYPE),
            Step(AddTransactionStep.TYPE, "type", FlowValidators.validate_transaction_type,
                 self.type_prompt, next_step=AddTransactionStep.CATEGORY),
            Step(AddTransactionStep.CATEGORY, "category", FlowValidators.validate_category,
                 self.category_prompt, next_step=AddTransactionStep.AMOUNT),
            Step(AddTransactionStep.AMOUNT, "amount", FlowValidators.validate_positive_amount,
                 f"💵 Enter the *amount* (in {settings.CURRENCY_SYMBOL}):", next_step=AddTransactionStep.DATE),
            Step(AddTransactionStep.DATE, "date", FlowValidators.validate_transaction_date,
                 "📅 Enter the *date* (YYYY-MM-DD) or type \"today\":"),
        ]

    @staticmethod
    def type_prompt(data: Dict) -> Content:
        return WhatsAppHelper.create_simple_interactive(
            "📊 Select transaction *type*:",
            [("tx_type_cost", "🔴 Cost (Expense)"), ("tx_type_income", "🟢 Income")],
        )

    @staticmethod
    def category_prompt(data: Dict) -> Content:
        categories = FlowValidators.categories_for(data.get("type"))
        return WhatsAppHelper.create_simple_interactive(
            "📂 Select a *category*:",
            [(f"tx_cat_{category}", category) for category in categories],
            button_text="Categories",
            section_title="Categories",
        )

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        result = await self.api.add_transaction(
            card_id=data["card_id"],
            title=data["title"],
            tx_type=data["type"],
            category=data["category"],
            amount=data["amount"],
            date=data["date"],
        )
        if not result.ok:
            return self.create_failure("add transaction", result.error_message)

        is_cost = data["type"] == TransactionType.COST.value
        icon = "🔴" if is_cost else "🟢"
        sign = "-" if is_cost else "+"
        message = (
            f"✅ Transaction added!\n\n{icon} {data['title']}\n"
            f"{sign}{ReportFormatter.money(data['amount'])} • {data['category']} • {data['date']}"
        )
        if TimezoneHelper.is_future(data["date"]):
            message += "\n\n⏰ Scheduled: it will not affect the balance until its date."
        return FlowOutcome(True, message)
