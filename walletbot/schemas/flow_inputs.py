import math
import re
from datetime import datetime
from pydantic import BaseModel, field_validator
from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def _parse_amount(raw) -> float:
    text = str(raw).strip().replace(',', '.')
    try:
        amount = float(text)
    except ValueError:
        raise PydanticCustomError('amount_invalid', 'Invalid amount. Please enter a valid number')
    if math.isnan(amount) or math.isinf(amount):
        raise PydanticCustomError('amount_invalid', 'Invalid amount. Please enter a valid number')
    return amount


class TextSchema(BaseModel):
    """Free text that must not be blank (names, titles, wish names)"""
    value: str

    @field_validator('value')
    def validate_text(cls, v):
        v = v.strip()
        if not v:
            raise PydanticCustomError('text_empty', 'This field cannot be empty. Please try again')
        return v


class EmailSchema(BaseModel):
    """Email address used for login and signup"""
    email: str

    @field_validator('email')
    def validate_email(cls, v):
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise PydanticCustomError('email_invalid', 'Invalid email address. Please enter something like name@example.com')
        return v


class PasswordSchema(BaseModel):
    """New account password"""
    password: str

    @field_validator('password')
    def validate_password(cls, v):
        if len(v) < 6:
            raise PydanticCustomError('password_short', 'Password must be at least 6 characters. Please try again')
        return v


class CardNumberSchema(BaseModel):
    """Card number: exactly 16 digits, spaces are ignored"""
    card_number: str

    @field_validator('card_number')
    def validate_card_number(cls, v):
        v = re.sub(r'\s', '', v)
        if not re.match(r'^\d{16}$', v):
            raise PydanticCustomError('card_number_invalid', 'Invalid card number. Please enter exactly 16 digits')
        return v


class NonNegativeAmountSchema(BaseModel):
    """Amount that may be zero (initial balance, plan goal)"""
    amount: float

    @field_validator('amount', mode='before')
    def validate_amount(cls, v):
        amount = _parse_amount(v)
        if amount < 0:
            raise PydanticCustomError('amount_negative', 'Invalid amount. Please enter a number that is not negative')
        return amount


class PositiveAmountSchema(BaseModel):
    """Amount strictly greater than zero (transactions, limits, wishes)"""
    amount: float

    @field_validator('amount', mode='before')
    def validate_amount(cls, v):
        amount = _parse_amount(v)
        if amount <= 0:
            raise PydanticCustomError('amount_not_positive', 'Invalid amount. Please enter a positive number')
        return amount


class MonthSchema(BaseModel):
    """Month key YYYY-MM"""
    month: str

    @field_validator('month')
    def validate_month(cls, v):
        v = v.strip()
        if not MONTH_PATTERN.match(v):
            raise PydanticCustomError('month_invalid', 'Invalid format. Please use YYYY-MM (e.g., 2026-01)')
        return v


class TransactionDateSchema(BaseModel):
    """Calendar date YYYY-MM-DD ("today" is resolved before validation)"""
    date: str

    @field_validator('date')
    def validate_date(cls, v):
        v = v.strip()
        if not DATE_PATTERN.match(v):
            raise PydanticCustomError('date_invalid', 'Invalid date format. Please use YYYY-MM-DD or type "today"')
        try:
            datetime.strptime(v, '%Y-%m-%d')
        except ValueError:
            raise PydanticCustomError('date_invalid', 'That date does not exist. Please use YYYY-MM-DD or type "today"')
        return v
