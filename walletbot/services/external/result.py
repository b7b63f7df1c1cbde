from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar

from walletbot.core.errors import CommitError, WalletBotError

T = TypeVar("T")


@dataclass(frozen=True)
class ApiResult(Generic[T]):
    """
    Outcome of a persistence call: a success payload or an error.

    API clients never raise to their callers; they return a failure instead.
    """
    value: Optional[T] = None
    error: Optional[WalletBotError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> str:
        return self.error.message if self.error else ""

    @classmethod
    def success(cls, value: Optional[T] = None) -> "ApiResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, message: str, error_type: Type[WalletBotError] = CommitError) -> "ApiResult[T]":
        return cls(error=error_type(message))
