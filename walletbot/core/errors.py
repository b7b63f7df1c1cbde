"""
Error taxonomy of the bot core.

None of these errors is fatal: every one of them ends up as a user-visible
message and, where relevant, a state cleanup.
"""


class WalletBotError(Exception):
    """Base error for the bot."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(WalletBotError):
    """Malformed step input. Raised by the step parsers, always recovered by re-prompting the same step."""


class CommitError(WalletBotError):
    """A persistence operation failed at a terminal step."""


class AuthorizationError(WalletBotError):
    """A stateful command was invoked without an active session."""


class NotFoundError(WalletBotError):
    """A referenced card (or other entity) does not exist."""
