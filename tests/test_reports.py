import json
from datetime import date
from urllib.parse import parse_qs, urlparse

import pytest

from walletbot.core.config import get_settings
from walletbot.models.finance import Card, MonthlyAmount, Transaction, Wish
from walletbot.services.reports.aggregates import (
    limit_status,
    month_spending,
    plan_status,
    progress_bar,
    scheduled_projection,
    wish_progress,
)
from walletbot.services.reports.charts import (
    get_date_range,
    income_vs_expense_chart,
    render_stats_chart,
    spending_by_category_chart,
)
from walletbot.services.reports.formatter import ReportFormatter


def _tx(tx_type, amount, day, category="Food", scheduled=False):
    return Transaction(
        card_id="c1", title="t", type=tx_type, category=category, amount=amount, date=day,
        scheduled=scheduled, is_affect=not scheduled,
    )


def _chart_config(url):
    return json.loads(parse_qs(urlparse(url).query)["c"][0])


# ==================== AGGREGATES ====================

def test_month_spending_counts_only_applied_costs_of_the_month():
    txs = [
        _tx("cost", 30, "2026-01-03"),
        _tx("cost", 20, "2026-01-28"),
        _tx("income", 500, "2026-01-10"),
        _tx("cost", 99, "2026-02-01"),
        _tx("cost", 40, "2026-01-31", scheduled=True),
    ]
    assert month_spending(txs, "2026-01") == 50


@pytest.mark.parametrize("percentage, filled", [(0, 0), (4, 0), (45, 5), (99, 10), (100, 10), (250, 10), (-5, 0)])
def test_progress_bar(percentage, filled):
    bar = progress_bar(percentage)
    assert len(bar) == 10
    assert bar.count("█") == filled


def test_limit_status_over_limit():
    card = Card(id="c1", card_number="4111111111111111", limits=[MonthlyAmount(month="2026-01", amount=100)])

    status = limit_status(card, [_tx("cost", 150, "2026-01-05")], "2026-01")

    assert status.percentage == 100
    assert status.remaining == 0
    assert status.over_by == 50
    assert status.over_limit


def test_limit_status_without_limit():
    card = Card(id="c1", card_number="4111111111111111")
    assert limit_status(card, [], "2026-01") is None


def test_wish_progress_is_clamped():
    assert wish_progress(1500, Wish(name="Phone", target_amount=1000)).percentage == 100
    assert wish_progress(-20, Wish(name="Phone", target_amount=1000)).percentage == 0

    progress = wish_progress(250, Wish(name="Phone", target_amount=1000))
    assert progress.percentage == 25
    assert progress.remaining == 750
    assert not progress.achieved


def test_plan_is_met_at_the_goal():
    assert plan_status(100, MonthlyAmount(month="2026-01", amount=100)).met
    assert not plan_status(99.99, MonthlyAmount(month="2026-01", amount=100)).met


def test_scheduled_projection_runs_in_date_order():
    scheduled = [
        _tx("income", 200, "2026-03-01", scheduled=True),
        _tx("cost", 50, "2026-02-01", scheduled=True),
    ]

    assert scheduled_projection(100, scheduled) == [("Current", 100), ("2026-02-01", 50), ("2026-03-01", 250)]


# ==================== CHARTS ====================

@pytest.mark.parametrize("period, expected", [
    ("week", ("2026-02-03", "2026-02-10")),
    ("month", ("2026-02-01", "2026-02-28")),
    ("year", ("2026-01-01", "2026-02-10")),
    ("all", ("2000-01-01", "2100-12-31")),
])
def test_date_ranges(period, expected):
    assert get_date_range(period, today=date(2026, 2, 10)) == expected


def test_three_months_back_clamps_the_day():
    assert get_date_range("3months", today=date(2026, 5, 31)) == ("2026-02-28", "2026-05-31")


def test_category_chart_without_costs():
    assert spending_by_category_chart([_tx("income", 10, "2026-01-01")]) is None


def test_category_chart_url():
    url = spending_by_category_chart([
        _tx("cost", 10, "2026-01-01", category="Food"),
        _tx("cost", 5, "2026-01-02", category="Food"),
        _tx("cost", 7, "2026-01-02", category="Bills"),
    ])

    assert url.startswith(get_settings().QUICKCHART_URL)
    config = _chart_config(url)
    assert config["type"] == "doughnut"
    assert config["data"]["labels"] == ["Food", "Bills"]
    assert config["data"]["datasets"][0]["data"] == [15, 7]


def test_income_vs_expense_groups_by_month():
    config = _chart_config(income_vs_expense_chart([
        _tx("income", 100, "2026-02-01"),
        _tx("cost", 30, "2026-01-15"),
    ]))

    assert config["data"]["labels"] == ["Jan 26", "Feb 26"]
    assert config["data"]["datasets"][0]["data"] == [0, 100]
    assert config["data"]["datasets"][1]["data"] == [30, 0]


def test_render_stats_chart_filters_by_period():
    txs = [_tx("cost", 10, "2025-06-01")]

    assert render_stats_chart("category", "month", txs, 0, today=date(2026, 2, 10)) is None
    url, caption = render_stats_chart("category", "all", txs, 0, today=date(2026, 2, 10))
    assert caption == "📊 Spending by Category"


def test_scheduled_chart_ignores_period():
    txs = [_tx("cost", 10, "2999-01-01", scheduled=True)]

    result = render_stats_chart("scheduled", "week", txs, 100, today=date(2026, 2, 10))

    assert result is not None
    assert _chart_config(result[0])["data"]["datasets"][0]["data"] == [100, 90]


# ==================== FORMATTER ====================

def test_wish_status_marks_achieved_wishes():
    card = Card(
        id="c1", card_number="4111111111111111", current_amount=600,
        wishes=[Wish(name="Phone", target_amount=500), Wish(name="Car", target_amount=6000)],
    )

    text = ReportFormatter.wish_status([card])

    assert "✅ ACHIEVED!" in text
    assert "5400.00 ₼ more needed" in text


def test_wish_status_without_wishes():
    card = Card(id="c1", card_number="4111111111111111")
    assert "No wishes set for any card" in ReportFormatter.wish_status([card])


def test_transactions_view_truncates():
    card = Card(id="c1", card_number="4111111111111111")
    txs = [_tx("cost", i, "2026-01-01") for i in range(1, 13)]

    assert ReportFormatter.transactions(card, txs).endswith("_...and 2 more transactions_")
