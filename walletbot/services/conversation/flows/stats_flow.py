from enum import Enum
from typing import Dict, List

from walletbot.services.messaging import Content
from walletbot.services.reports.aggregates import total_balance
from walletbot.services.reports.charts import (
    CHART_LABELS,
    PERIOD_LABELS,
    ChartType,
    render_stats_chart,
)
from walletbot.shared.whatsapp import WhatsAppHelper
from .base_flow import BaseFlow, FlowOutcome, Step
from .validators import FlowValidators

NOT_ENOUGH_DATA = "📭 Not enough data to generate this chart. Try adding more transactions!"


class StatsStep(str, Enum):
    PERIOD = "awaiting_stats_period"
    CHART = "awaiting_stats_chart"


class StatsFlow(BaseFlow):
    """Picks a period and a chart, then sends the chart image of every card of the user."""

    name = "stats"
    steps_enum = StatsStep
    progress_message = "⏳ Generating chart..."

    def build_steps(self) -> List[Step]:
        return [
            Step(StatsStep.PERIOD, "period", FlowValidators.validate_stats_period,
                 self.period_prompt, next_step=StatsStep.CHART),
            Step(StatsStep.CHART, "chart", FlowValidators.validate_chart_type,
                 self.chart_prompt),
        ]

    @staticmethod
    def period_prompt(data: Dict) -> Content:
        return WhatsAppHelper.create_simple_interactive(
            "📊 *Select a time period for statistics:*",
            [(f"stats_period_{period.value}", label) for period, label in PERIOD_LABELS.items()],
            button_text="Periods",
            section_title="Period",
        )

    @staticmethod
    def chart_prompt(data: Dict) -> Content:
        return WhatsAppHelper.create_simple_interactive(
            "📊 *Select a chart type:*",
            [(f"stats_chart_{chart.value}", label) for chart, label in CHART_LABELS.items()],
            button_text="Charts",
            section_title="Charts",
        )

    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        tx_result = await self.api.get_all_user_transactions(data["user_id"])
        if not tx_result.ok:
            self.logger.error(f"[STATS] Could not load transactions: {tx_result.error_message}")
            return FlowOutcome(False, "❌ Failed to generate chart. Please try again.")

        balance = 0.0
        if data["chart"] == ChartType.SCHEDULED.value:
            cards_result = await self.api.get_user_cards(data["user_id"])
            if not cards_result.ok:
                return FlowOutcome(False, "❌ Failed to generate chart. Please try again.")
            balance = total_balance(cards_result.value)

        chart = render_stats_chart(data["chart"], data["period"], tx_result.value, balance)
        if chart is None:
            return FlowOutcome(True, NOT_ENOUGH_DATA)

        url, caption = chart
        return FlowOutcome(True, {"type": "image", "image": {"link": url, "caption": caption}})
