"""
Pure aggregate functions over cards and transactions.

Nothing here talks to the network; callers fetch the data and pass it in.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from walletbot.models.finance import Card, MonthlyAmount, Transaction, TransactionType, Wish

PROGRESS_CELLS = 10


def _clamp_percentage(value: float) -> float:
    return max(0.0, min(value, 100.0))


def total_balance(cards: Iterable[Card]) -> float:
    return sum(card.current_amount for card in cards)


def month_spending(transactions: Iterable[Transaction], month: str) -> float:
    """Sum of applied costs whose date falls in `month` (YYYY-MM)."""
    return sum(
        tx.amount
        for tx in transactions
        if tx.type == TransactionType.COST and tx.is_affect and tx.date[:7] == month
    )


def progress_bar(percentage: float) -> str:
    """10 cell text bar, one filled cell per 10% (half cells round up)."""
    filled = int(_clamp_percentage(percentage) / 10 + 0.5)
    return "█" * filled + "░" * (PROGRESS_CELLS - filled)


@dataclass(frozen=True)
class LimitStatus:
    month: str
    limit: float
    spent: float
    percentage: float
    remaining: float
    over_by: float

    @property
    def over_limit(self) -> bool:
        return self.over_by > 0


def find_monthly(entries: Iterable[MonthlyAmount], month: str) -> Optional[MonthlyAmount]:
    return next((entry for entry in entries if entry.month == month), None)


def limit_status(card: Card, transactions: Iterable[Transaction], month: str) -> Optional[LimitStatus]:
    """
    Spending of a month against the card's limit for that month.

    Returns:
        LimitStatus, or None when the card has no limit for the month
    """
    limit = find_monthly(card.limits, month)
    if limit is None:
        return None

    spent = month_spending(transactions, month)
    percentage = _clamp_percentage(spent / limit.amount * 100) if limit.amount > 0 else 100.0

    return LimitStatus(
        month=month,
        limit=limit.amount,
        spent=spent,
        percentage=percentage,
        remaining=max(limit.amount - spent, 0.0),
        over_by=max(spent - limit.amount, 0.0),
    )


@dataclass(frozen=True)
class WishProgress:
    name: str
    target: float
    percentage: float
    remaining: float

    @property
    def achieved(self) -> bool:
        return self.remaining <= 0


def wish_progress(balance: float, wish: Wish) -> WishProgress:
    """Progress of the card balance towards a wish target."""
    if wish.target_amount > 0:
        percentage = _clamp_percentage(balance / wish.target_amount * 100)
    else:
        percentage = 100.0
    return WishProgress(
        name=wish.name,
        target=wish.target_amount,
        percentage=percentage,
        remaining=max(wish.target_amount - balance, 0.0),
    )


@dataclass(frozen=True)
class PlanStatus:
    month: str
    goal: float
    met: bool


def plan_status(balance: float, plan: MonthlyAmount) -> PlanStatus:
    """A plan is met while the balance stays at or above its goal."""
    return PlanStatus(month=plan.month, goal=plan.amount, met=balance >= plan.amount)


def scheduled_projection(balance: float, scheduled: Iterable[Transaction]) -> List[Tuple[str, float]]:
    """
    Running balance after each scheduled transaction, in date order.

    Returns:
        [("Current", balance), (date, balance_after), ...]
    """
    points = [("Current", balance)]
    running = balance
    for tx in sorted(scheduled, key=lambda tx: tx.date):
        running += tx.signed_amount
        points.append((tx.date[:10], running))
    return points


@dataclass(frozen=True)
class ScheduledSummary:
    income: float
    expense: float

    @property
    def net(self) -> float:
        return self.income - self.expense


def scheduled_summary(transactions: Iterable[Transaction]) -> ScheduledSummary:
    income = 0.0
    expense = 0.0
    for tx in transactions:
        if tx.type == TransactionType.COST:
            expense += tx.amount
        else:
            income += tx.amount
    return ScheduledSummary(income=income, expense=expense)
