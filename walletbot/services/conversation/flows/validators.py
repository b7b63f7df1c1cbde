import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Type
import pydantic
from pydantic import BaseModel

from walletbot.core.errors import ValidationError
from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.models.finance import CATEGORIES, TransactionType
from walletbot.schemas.flow_inputs import (
    CardNumberSchema,
    EmailSchema,
    MonthSchema,
    NonNegativeAmountSchema,
    PasswordSchema,
    PositiveAmountSchema,
    TextSchema,
    TransactionDateSchema,
)
from walletbot.services.reports.charts import ChartType, StatsPeriod
from .selection_handler import SelectionHandler

logger = logging.getLogger(__name__)

# (is_valid, error_message, cleaned_value)
ValidationResult = Tuple[bool, str, Optional[Any]]


class FlowValidators:
    """
    Single responsibility: validate the input of every flow step.
    Wraps the pydantic schemas and returns (is_valid, error_message, cleaned_value).

    Every validator takes the raw message and the data accumulated so far,
    some steps (category) depend on earlier answers. Parsers raise
    ValidationError; `_check` turns it into the result triple. Raw input is
    never logged here, steps may carry passwords.
    """

    @staticmethod
    def _check(parse: Callable[[], Any], label: str) -> ValidationResult:
        try:
            cleaned = parse()
        except ValidationError as e:
            logger.info(f"{label} rejected: {e.message}")
            return (False, e.message, None)
        logger.debug(f"{label} accepted")
        return (True, "", cleaned)

    @staticmethod
    def _require(value: Optional[Any], error_message: str) -> Any:
        if value is None:
            raise ValidationError(error_message)
        return value

    @staticmethod
    def _parse_schema(schema: Type[BaseModel], field: str, value: Any) -> Any:
        try:
            return getattr(schema(**{field: value}), field)
        except pydantic.ValidationError as e:
            raise ValidationError(e.errors()[0]['msg']) from e

    @staticmethod
    def _run_schema(schema: Type[BaseModel], field: str, value: Any) -> ValidationResult:
        return FlowValidators._check(
            lambda: FlowValidators._parse_schema(schema, field, value), schema.__name__
        )

    @staticmethod
    def validate_text(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._run_schema(TextSchema, "value", message)

    @staticmethod
    def validate_email(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._run_schema(EmailSchema, "email", message)

    @staticmethod
    def validate_login_password(message: str, data: Dict) -> ValidationResult:
        """Login passwords are checked by the identity provider, only blanks are rejected."""
        return FlowValidators._check(
            lambda: FlowValidators._require(message or None, "Please enter your password"),
            "Login password",
        )

    @staticmethod
    def validate_new_password(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._run_schema(PasswordSchema, "password", message)

    @staticmethod
    def validate_card_number(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._run_schema(CardNumberSchema, "card_number", message)

    @staticmethod
    def validate_non_negative_amount(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._run_schema(NonNegativeAmountSchema, "amount", message)

    @staticmethod
    def validate_positive_amount(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._run_schema(PositiveAmountSchema, "amount", message)

    @staticmethod
    def validate_month(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._run_schema(MonthSchema, "month", message)

    @staticmethod
    def validate_transaction_date(message: str, data: Dict) -> ValidationResult:
        """Accepts YYYY-MM-DD or the literal "today" (any case)."""
        text = (message or "").strip()
        if text.lower() == "today":
            return (True, "", TimezoneHelper.today_iso())
        return FlowValidators._run_schema(TransactionDateSchema, "date", text)

    @staticmethod
    def parse_transaction_type(message: str) -> str:
        """
        "cost"/"income", the button ids tx_type_* and a few synonyms.

        Raises:
            ValidationError: Anything else
        """
        text = (message or "").strip().lower()
        if text.startswith("tx_type_"):
            text = text[len("tx_type_"):]
        synonyms = {"expense": "cost", "1": "cost", "2": "income"}
        text = synonyms.get(text, text)
        try:
            return TransactionType(text).value
        except ValueError:
            raise ValidationError("Invalid type. Please choose cost or income")

    @staticmethod
    def validate_transaction_type(message: str, data: Dict) -> ValidationResult:
        return FlowValidators._check(lambda: FlowValidators.parse_transaction_type(message), "Transaction type")

    @staticmethod
    def validate_category(message: str, data: Dict) -> ValidationResult:
        """The category must belong to the fixed set of the chosen type."""
        categories = FlowValidators.categories_for(data.get("type"))
        return FlowValidators._check(
            lambda: FlowValidators._require(
                FlowValidators.match_option(message, categories, prefix="tx_cat_"),
                f"Invalid category. Please choose one of: {', '.join(categories)}",
            ),
            "Category",
        )

    @staticmethod
    def categories_for(tx_type: Optional[str]) -> List[str]:
        try:
            return CATEGORIES[TransactionType(tx_type)]
        except ValueError:
            return CATEGORIES[TransactionType.COST]

    @staticmethod
    def match_option(message: str, options: List[str], prefix: str = "") -> Optional[str]:
        """
        Matches a reply against a fixed option list.

        Accepts the button/list id (prefix + option), the option itself in any
        case, or its 1-based index.
        """
        text = (message or "").strip()
        if prefix and text.startswith(prefix):
            text = text[len(prefix):]
        lowered = text.lower()
        for option in options:
            if option.lower() == lowered:
                return option
        if text.isdigit() and 1 <= int(text) <= len(options):
            return options[int(text) - 1]
        return None

    @staticmethod
    def validate_card_selection(message: str, data: Dict) -> ValidationResult:
        """The reply must point at one of the card options offered."""
        def parse():
            option = FlowValidators._require(
                SelectionHandler.extract_user_selection(message, data.get("card_options", [])),
                "Invalid card. Pick one from the list, its number in the list or its last 4 digits",
            )
            return option["id"]
        return FlowValidators._check(parse, "Card selection")

    @staticmethod
    def validate_stats_period(message: str, data: Dict) -> ValidationResult:
        periods = [period.value for period in StatsPeriod]
        return FlowValidators._check(
            lambda: FlowValidators._require(
                FlowValidators.match_option(message, periods, prefix="stats_period_"),
                f"Invalid period. Please choose one of: {', '.join(periods)}",
            ),
            "Stats period",
        )

    @staticmethod
    def validate_chart_type(message: str, data: Dict) -> ValidationResult:
        charts = [chart.value for chart in ChartType]
        return FlowValidators._check(
            lambda: FlowValidators._require(
                FlowValidators.match_option(message, charts, prefix="stats_chart_"),
                f"Invalid chart. Please choose one of: {', '.join(charts)}",
            ),
            "Chart type",
        )
