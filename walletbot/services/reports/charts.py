"""
Chart image URLs rendered by QuickChart (Chart.js configs passed in the query string).

Every builder returns None when there is nothing to draw.
"""

import calendar
import json
import logging
from collections import defaultdict
from datetime import date, timedelta
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote

from walletbot.core.config import get_settings
from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.models.finance import Transaction, TransactionType
from .aggregates import scheduled_projection

logger = logging.getLogger(__name__)
settings = get_settings()

PALETTE = ['#FF6384', '#36A2EB', '#FFCE56', '#4BC0C0', '#9966FF', '#FF9F40', '#FF6384', '#C9CBCF']
INCOME_COLOR = '#4BC0C0'
EXPENSE_COLOR = '#FF6384'
TREND_DAYS = 30


class StatsPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "3months"
    YEAR = "year"
    ALL = "all"


class ChartType(str, Enum):
    CATEGORY = "category"
    INCOME_EXPENSE = "income_expense"
    NET = "net"
    TREND = "trend"
    SCHEDULED = "scheduled"
    TOTAL = "total"


PERIOD_LABELS = {
    StatsPeriod.WEEK: "This Week",
    StatsPeriod.MONTH: "This Month",
    StatsPeriod.THREE_MONTHS: "Last 3 Months",
    StatsPeriod.YEAR: "This Year",
    StatsPeriod.ALL: "All Time",
}

CHART_LABELS = {
    ChartType.CATEGORY: "🍩 Spending by Category",
    ChartType.INCOME_EXPENSE: "📊 Income vs Expense",
    ChartType.NET: "📈 Net Revenue",
    ChartType.TREND: "📉 Spending Trend",
    ChartType.SCHEDULED: "⏰ Scheduled Impact",
    ChartType.TOTAL: "💰 Total Breakdown",
}


def _chart_url(config: Dict, width: int = 600, height: int = 400) -> str:
    encoded = quote(json.dumps(config, separators=(",", ":")), safe="")
    return f"{settings.QUICKCHART_URL}?c={encoded}&w={width}&h={height}"


def _title(text: str) -> Dict:
    return {"display": True, "text": text, "fontSize": 18}


def _month_label(month_key: str) -> str:
    year, month = month_key.split("-")
    return date(int(year), int(month), 1).strftime("%b %y")


def _day_label(iso_date: str) -> str:
    parsed = TimezoneHelper.parse_iso_date(iso_date)
    if parsed is None:
        return iso_date
    return f"{parsed.strftime('%b')} {parsed.day}"


def _subtract_months(day: date, months: int) -> date:
    month_index = day.year * 12 + day.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def get_date_range(period: str, today: Optional[date] = None) -> Tuple[str, str]:
    """
    Inclusive (start, end) ISO dates of a stats period.

    week: the last 7 days; month: the whole calendar month; 3months: the
    last three months; year: January 1st to today; anything else: all time.
    """
    today = today or TimezoneHelper.get_local_today()

    if period == StatsPeriod.WEEK:
        start, end = today - timedelta(days=7), today
    elif period == StatsPeriod.MONTH:
        start = today.replace(day=1)
        end = today.replace(day=calendar.monthrange(today.year, today.month)[1])
    elif period == StatsPeriod.THREE_MONTHS:
        start, end = _subtract_months(today, 3), today
    elif period == StatsPeriod.YEAR:
        start, end = date(today.year, 1, 1), today
    else:
        start, end = date(2000, 1, 1), date(2100, 12, 31)

    return start.isoformat(), end.isoformat()


def filter_by_period(transactions: Iterable[Transaction], period: str, today: Optional[date] = None) -> List[Transaction]:
    start, end = get_date_range(period, today)
    return [tx for tx in transactions if start <= tx.date[:10] <= end]


def spending_by_category_chart(transactions: Iterable[Transaction], title: str = "Spending by Category") -> Optional[str]:
    totals: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        if tx.type == TransactionType.COST and tx.is_affect:
            totals[tx.category or "Other"] += tx.amount

    if not totals:
        return None

    config = {
        "type": "doughnut",
        "data": {
            "labels": list(totals),
            "datasets": [{"data": list(totals.values()), "backgroundColor": PALETTE}],
        },
        "options": {
            "title": _title(title),
            "plugins": {"datalabels": {"display": True, "color": "#fff", "font": {"weight": "bold"}}},
        },
    }
    return _chart_url(config, 500, 400)


def _monthly_totals(transactions: Iterable[Transaction]) -> Dict[str, Dict[str, float]]:
    monthly: Dict[str, Dict[str, float]] = defaultdict(lambda: {"income": 0.0, "expense": 0.0})
    for tx in transactions:
        if not tx.is_affect:
            continue
        key = "expense" if tx.type == TransactionType.COST else "income"
        monthly[tx.date[:7]][key] += tx.amount
    return monthly


def income_vs_expense_chart(transactions: Iterable[Transaction], title: str = "Income vs Expense") -> Optional[str]:
    monthly = _monthly_totals(transactions)
    months = sorted(monthly)
    if not months:
        return None

    config = {
        "type": "bar",
        "data": {
            "labels": [_month_label(m) for m in months],
            "datasets": [
                {"label": "Income", "data": [monthly[m]["income"] for m in months], "backgroundColor": INCOME_COLOR},
                {"label": "Expense", "data": [monthly[m]["expense"] for m in months], "backgroundColor": EXPENSE_COLOR},
            ],
        },
        "options": {"title": _title(title), "scales": {"yAxes": [{"ticks": {"beginAtZero": True}}]}},
    }
    return _chart_url(config)


def net_revenue_chart(transactions: Iterable[Transaction], title: str = "Net Revenue Over Time") -> Optional[str]:
    """Net (income minus expense) per month, plus the cumulative net as a line."""
    monthly = _monthly_totals(transactions)
    months = sorted(monthly)
    if not months:
        return None

    net = [monthly[m]["income"] - monthly[m]["expense"] for m in months]
    cumulative = []
    running = 0.0
    for value in net:
        running += value
        cumulative.append(running)

    config = {
        "type": "bar",
        "data": {
            "labels": [_month_label(m) for m in months],
            "datasets": [
                {
                    "label": "Net Revenue",
                    "data": net,
                    "backgroundColor": [INCOME_COLOR if v >= 0 else EXPENSE_COLOR for v in net],
                },
                {
                    "type": "line",
                    "label": "Cumulative",
                    "data": cumulative,
                    "fill": False,
                    "borderColor": "#36A2EB",
                },
            ],
        },
        "options": {"title": _title(title), "scales": {"yAxes": [{"ticks": {"beginAtZero": False}}]}},
    }
    return _chart_url(config)


def spending_trend_chart(transactions: Iterable[Transaction], title: str = "Daily Spending Trend") -> Optional[str]:
    """Daily applied costs, the last 30 days that have any."""
    daily: Dict[str, float] = defaultdict(float)
    for tx in transactions:
        if tx.type == TransactionType.COST and tx.is_affect:
            daily[tx.date[:10]] += tx.amount

    days = sorted(daily)[-TREND_DAYS:]
    if not days:
        return None

    config = {
        "type": "line",
        "data": {
            "labels": [_day_label(d) for d in days],
            "datasets": [{
                "label": "Daily Spending",
                "data": [daily[d] for d in days],
                "fill": True,
                "borderColor": EXPENSE_COLOR,
                "backgroundColor": "rgba(255, 99, 132, 0.2)",
                "tension": 0.3,
            }],
        },
        "options": {"title": _title(title), "scales": {"yAxes": [{"ticks": {"beginAtZero": True}}]}},
    }
    return _chart_url(config)


def scheduled_impact_chart(current_balance: float, scheduled: Iterable[Transaction], title: str = "Scheduled Transactions Impact") -> Optional[str]:
    points = scheduled_projection(current_balance, scheduled)
    if len(points) < 2:
        return None

    config = {
        "type": "line",
        "data": {
            "labels": [label if label == "Current" else _day_label(label) for label, _ in points],
            "datasets": [{
                "label": "Expected Balance",
                "data": [balance for _, balance in points],
                "fill": False,
                "borderColor": "#36A2EB",
                "backgroundColor": "#36A2EB",
                "tension": 0.1,
            }],
        },
        "options": {"title": _title(title), "scales": {"yAxes": [{"ticks": {"beginAtZero": False}}]}},
    }
    return _chart_url(config)


def total_revenue_chart(transactions: Iterable[Transaction], title: str = "Total Revenue Breakdown") -> Optional[str]:
    """Applied vs scheduled income and expense."""
    totals = {"current_income": 0.0, "current_expense": 0.0, "scheduled_income": 0.0, "scheduled_expense": 0.0}
    has_data = False
    for tx in transactions:
        kind = "expense" if tx.type == TransactionType.COST else "income"
        if tx.is_affect:
            totals[f"current_{kind}"] += tx.amount
            has_data = True
        elif tx.scheduled:
            totals[f"scheduled_{kind}"] += tx.amount
            has_data = True

    if not has_data:
        return None

    config = {
        "type": "bar",
        "data": {
            "labels": ["Current Income", "Current Expense", "Scheduled Income", "Scheduled Expense"],
            "datasets": [{
                "data": list(totals.values()),
                "backgroundColor": [INCOME_COLOR, EXPENSE_COLOR, "#36A2EB", "#FFCE56"],
            }],
        },
        "options": {
            "title": _title(title),
            "legend": {"display": False},
            "scales": {"yAxes": [{"ticks": {"beginAtZero": True}}]},
        },
    }
    return _chart_url(config)


def render_stats_chart(
    chart_type: str,
    period: str,
    transactions: List[Transaction],
    balance: float,
    today: Optional[date] = None,
) -> Optional[Tuple[str, str]]:
    """
    Builds the chart picked in the stats flow.

    The period filters every chart except the scheduled impact and the total
    breakdown, which always look at all transactions.

    Returns:
        (url, caption) or None when there is not enough data
    """
    chart = ChartType(chart_type)
    try:
        label = PERIOD_LABELS[StatsPeriod(period)]
    except ValueError:
        label = PERIOD_LABELS[StatsPeriod.ALL]
    filtered = filter_by_period(transactions, period, today)

    if chart == ChartType.CATEGORY:
        url = spending_by_category_chart(filtered, f"Spending by Category ({label})")
        caption = "Spending by Category"
    elif chart == ChartType.INCOME_EXPENSE:
        url = income_vs_expense_chart(filtered, f"Income vs Expense ({label})")
        caption = "Income vs Expense"
    elif chart == ChartType.NET:
        url = net_revenue_chart(filtered, f"Net Revenue ({label})")
        caption = "Net Revenue"
    elif chart == ChartType.TREND:
        url = spending_trend_chart(filtered, f"Spending Trend ({label})")
        caption = "Spending Trend"
    elif chart == ChartType.SCHEDULED:
        url = scheduled_impact_chart(balance, [tx for tx in transactions if tx.scheduled])
        caption = "Scheduled Impact"
    else:
        url = total_revenue_chart(transactions)
        caption = "Total Revenue"

    logger.debug(f"[CHARTS] {chart.value} for {period}: {'rendered' if url else 'no data'}")
    if url is None:
        return None
    return url, f"📊 {caption}"
