import logging
from typing import Dict, Optional, Sequence

from walletbot.models.finance import Card
from walletbot.models.session import ConversationState
from walletbot.services.messaging import Messenger
from walletbot.services.session import ConversationStateStore
from .flows import BaseFlow, FlowOutcome

logger = logging.getLogger(__name__)

UNKNOWN_STEP_MESSAGE = "⚠️ Something went wrong with the current operation. Please start it again."


class ConversationEngine:
    """
    Drives the multi-step flows.

    Single responsibility: look up the pending flow of a conversation,
    validate the reply against the current step and re-prompt, advance or
    commit. The conversation store is only written here.
    """

    def __init__(self, flows: Dict[str, BaseFlow], conversations: ConversationStateStore, messenger: Messenger):
        self.flows = flows
        self.conversations = conversations
        self.messenger = messenger

    async def start_flow(
        self,
        conversation_id: str,
        flow_name: str,
        context: Optional[Dict] = None,
        cards: Optional[Sequence[Card]] = None,
    ) -> ConversationState:
        """
        Starts a flow and sends its first prompt. A pending flow is discarded.

        Raises:
            NotFoundError: A card scoped flow was started without cards
            ValueError: Unknown flow
        """
        flow = self.flows.get(flow_name)
        if flow is None:
            raise ValueError(f"Unknown flow: {flow_name}")

        state = flow.initial_state(context, cards)

        previous = self.conversations.get(conversation_id)
        if previous is not None:
            logger.info(f"[ENGINE] Discarding pending '{previous.flow}' flow of {conversation_id}")

        self.conversations.set(conversation_id, state)
        logger.info(f"[ENGINE] Flow '{flow_name}' started for {conversation_id} at '{state.step}'")

        step = flow.get_step(state.step)
        await self.messenger.send(conversation_id, flow.render_prompt(step, state.data))
        return state

    async def handle_input(self, conversation_id: str, text: str) -> bool:
        """
        Feeds a free text reply to the pending flow.

        Returns:
            bool: False when the conversation has no pending flow
        """
        state = self.conversations.get(conversation_id)
        if state is None:
            return False

        flow = self.flows.get(state.flow)
        step = flow.get_step(state.step) if flow else None
        if step is None:
            logger.warning(f"[ENGINE] Unknown step '{state.flow}/{state.step}' for {conversation_id}")
            self.conversations.clear(conversation_id)
            await self.messenger.send(conversation_id, UNKNOWN_STEP_MESSAGE)
            return True

        flow.log_step(state.step, conversation_id, "***" if step.sensitive else text)

        is_valid, error_msg, value = step.validator(text or "", state.data)
        if not is_valid:
            await self.messenger.send(conversation_id, flow.create_error_response(error_msg))
            return True

        data = {**state.data, step.field: value}

        if not step.is_terminal:
            self.conversations.set(conversation_id, state.advance(step.next_step, data))
            next_step = flow.get_step(step.next_step)
            await self.messenger.send(conversation_id, flow.render_prompt(next_step, data))
            return True

        await self._complete(conversation_id, flow, data)
        return True

    async def _complete(self, conversation_id: str, flow: BaseFlow, data: Dict):
        """Runs the terminal side effect. The state is cleared whatever the outcome."""
        try:
            await self.messenger.send(conversation_id, flow.progress_message)
            outcome = await flow.commit(conversation_id, data)
        except Exception as e:
            logger.error(f"[ENGINE] Commit of '{flow.name}' failed for {conversation_id}: {e}", exc_info=True)
            outcome = FlowOutcome(False, flow.create_error_response("Something went wrong. Please try again."))
        finally:
            self.conversations.clear(conversation_id)

        logger.info(f"[ENGINE] Flow '{flow.name}' finished for {conversation_id} (success={outcome.success})")
        await self.messenger.send(conversation_id, outcome.message)

    async def cancel(self, conversation_id: str) -> bool:
        """Drops the pending flow. Returns False when there was none."""
        state = self.conversations.get(conversation_id)
        if state is None:
            return False
        self.conversations.clear(conversation_id)
        logger.info(f"[ENGINE] Flow '{state.flow}' cancelled for {conversation_id}")
        return True

    def has_pending_flow(self, conversation_id: str) -> bool:
        return self.conversations.get(conversation_id) is not None
