from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Session(BaseModel):
    """Authenticated identity bound to a conversation."""
    subject_id: str
    email: str
    display_name: str = ""
    surname: str = ""
    established_at: datetime = Field(default_factory=_utc_now)


class ConversationState(BaseModel):
    """
    The single pending multi-step interaction of a conversation.

    `step` is the value of the flow's step enum and `data` accumulates the
    validated inputs collected so far.
    """
    flow: str
    step: str
    data: Dict[str, Any] = Field(default_factory=dict)

    def advance(self, step: str, data: Optional[Dict[str, Any]] = None) -> "ConversationState":
        """Returns a copy positioned on `step`; the current state is not mutated."""
        return ConversationState(
            flow=self.flow,
            step=step,
            data=dict(self.data if data is None else data),
        )
