from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Type, Union
import logging

from walletbot.core.errors import NotFoundError
from walletbot.models.finance import Card
from walletbot.models.session import ConversationState
from walletbot.services.messaging import Content
from walletbot.shared.whatsapp import WhatsAppHelper, WhatsAppLists
from .validators import FlowValidators, ValidationResult

CARD_STEP = "awaiting_card"

Validator = Callable[[str, Dict], ValidationResult]
Prompt = Union[str, Callable[[Dict], Content]]


@dataclass
class Step:
    """
    One row of a flow's step table.

    `field` is where the validated value is stored in the flow data;
    `next_step` None marks the terminal step, after which the flow commits.
    """
    name: str
    field: str
    validator: Validator
    prompt: Prompt
    next_step: Optional[str] = None
    sensitive: bool = False

    def __post_init__(self):
        if isinstance(self.name, Enum):
            self.name = self.name.value
        if isinstance(self.next_step, Enum):
            self.next_step = self.next_step.value

    @property
    def is_terminal(self) -> bool:
        return self.next_step is None


@dataclass(frozen=True)
class FlowOutcome:
    """Result of a terminal step: what to tell the user."""
    success: bool
    message: Content


class BaseFlow(ABC):
    """
    Base class of every conversation flow.

    A flow is declared as a table of steps plus a terminal side effect
    (commit). Driving the steps is the engine's job, flows never touch the
    conversation store.
    """

    name: str = ""
    steps_enum: Type[Enum]
    progress_message: str = "⏳ Working on it..."

    def __init__(self, api, sessions):
        self.api = api
        self.sessions = sessions
        self.logger = logging.getLogger(self.__class__.__name__)
        self._steps: Dict[str, Step] = {step.name: step for step in self.build_steps()}

    @abstractmethod
    def build_steps(self) -> List[Step]:
        """Step table of the flow, in order."""

    @abstractmethod
    async def commit(self, conversation_id: str, data: Dict) -> FlowOutcome:
        """
        Terminal side effect, run once every step holds a valid value.

        Args:
            conversation_id: Conversation the flow belongs to
            data: Every collected field plus the starting context

        Returns:
            FlowOutcome: Success or failure message for the user
        """

    @classmethod
    def first_step(cls) -> str:
        return next(iter(cls.steps_enum)).value

    @classmethod
    def initial_state(cls, context: Optional[Dict] = None, cards: Optional[Sequence[Card]] = None) -> ConversationState:
        """State of a freshly started flow, positioned on its first step."""
        return ConversationState(flow=cls.name, step=cls.first_step(), data=dict(context or {}))

    def get_step(self, step_name: str) -> Optional[Step]:
        return self._steps.get(step_name)

    def render_prompt(self, step: Step, data: Dict) -> Content:
        return step.prompt(data) if callable(step.prompt) else step.prompt

    def log_step(self, step: str, contact_id: str, message: str = ""):
        """Consistent step logging across flows."""
        flow_name = self.__class__.__name__.replace('Flow', '').upper()
        self.logger.info(f"[{flow_name}] Step '{step}' - Conversation: {contact_id}")
        if message:
            self.logger.debug(f"[{flow_name}] Message: '{message}'")

    def create_error_response(self, error_message: str) -> str:
        return f"❌ {error_message}"

    def create_failure(self, action: str, error_message: str) -> FlowOutcome:
        return FlowOutcome(False, self.create_error_response(f"Failed to {action}: {error_message}"))


class CardScopedFlow(BaseFlow):
    """
    Flow that works on one of the user's cards.

    With a single card the card is picked automatically; with several the
    flow starts on a card selection step that stores `card_id` and then
    moves to the first declared step.
    """

    card_prompt_text: str = "💳 Select a card:"

    @classmethod
    def initial_state(cls, context: Optional[Dict] = None, cards: Optional[Sequence[Card]] = None) -> ConversationState:
        data = dict(context or {})
        cards = list(cards or [])

        if not cards:
            raise NotFoundError("You have no cards yet. Use /addcard first!")

        if len(cards) == 1:
            data["card_id"] = cards[0].id
            return ConversationState(flow=cls.name, step=cls.first_step(), data=data)

        data["card_options"] = [
            {"id": card.id, "number": card.card_number[-4:], "balance": card.current_amount}
            for card in cards
        ]
        return ConversationState(flow=cls.name, step=CARD_STEP, data=data)

    def get_step(self, step_name: str) -> Optional[Step]:
        if step_name == CARD_STEP:
            return Step(
                name=CARD_STEP,
                field="card_id",
                validator=FlowValidators.validate_card_selection,
                prompt=self.card_prompt,
                next_step=self.first_step(),
            )
        return super().get_step(step_name)

    def card_prompt(self, data: Dict) -> Content:
        options = [
            {
                "id": f"card_{option['id']}",
                "title": f"Card **** {option['number']}",
                "description": f"Balance: {option['balance']:.2f}",
            }
            for option in data.get("card_options", [])[:WhatsAppLists.MAX_ROWS]
        ]
        return WhatsAppHelper.create_interactive_response(
            self.card_prompt_text, options, button_text="Cards", section_title="Your cards"
        )
