from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class TransactionType(str, Enum):
    COST = "cost"
    INCOME = "income"


# Fixed category sets offered for each transaction type
CATEGORIES = {
    TransactionType.COST: ["Food", "Transport", "Shopping", "Entertainment", "Bills", "Other"],
    TransactionType.INCOME: ["Salary", "Gift", "Refund", "Other"],
}


class MonthlyAmount(BaseModel):
    """Limit or plan entry. Unique per month inside a card."""
    month: str
    amount: float


class Wish(BaseModel):
    """Savings goal. Wishes are only ever appended, never deduplicated."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    target_amount: float = Field(alias="targetAmount")
    created_at: Optional[str] = Field(default=None, alias="createdAt")


class Card(BaseModel):
    """Card as stored by the ledger API."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    card_number: str
    current_amount: float = 0.0
    user_id: Optional[str] = None
    limits: List[MonthlyAmount] = Field(default_factory=list)
    plans: List[MonthlyAmount] = Field(default_factory=list)
    wishes: List[Wish] = Field(default_factory=list)
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @property
    def masked_number(self) -> str:
        return f"**** {self.card_number[-4:]}"


class Transaction(BaseModel):
    """Transaction as stored by the ledger API."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    card_id: str = Field(alias="cardId")
    title: str
    type: TransactionType
    category: str
    amount: float
    date: str
    scheduled: bool = False
    is_affect: bool = Field(default=True, alias="isAffect")
    include_in_expected: bool = Field(default=True, alias="includeInExpected")
    card_number: Optional[str] = Field(default=None, alias="cardNumber")
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @property
    def signed_amount(self) -> float:
        """Balance delta of the transaction: costs subtract, income adds."""
        return -self.amount if self.type == TransactionType.COST else self.amount


def upsert_monthly_amount(entries: List[MonthlyAmount], month: str, amount: float) -> List[MonthlyAmount]:
    """
    Replaces the amount of an existing month or appends a new entry.

    Returns a new list; the input list is left untouched.
    """
    updated = [entry.model_copy() for entry in entries]
    for entry in updated:
        if entry.month == month:
            entry.amount = float(amount)
            return updated
    updated.append(MonthlyAmount(month=month, amount=float(amount)))
    return updated
