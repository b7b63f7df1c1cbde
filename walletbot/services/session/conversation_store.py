import logging
from typing import Optional

from walletbot.models.session import ConversationState
from .store import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)


class ConversationStateStore:
    """
    Holds at most one in-progress flow per conversation.

    `set` is an unconditional overwrite used both to start and to advance a
    flow. Starting a flow while another one is pending abandons the old one;
    flows never nest.
    """

    def __init__(self, backend: Optional[KeyValueStore[ConversationState]] = None):
        self._backend = backend if backend is not None else InMemoryStore()

    def get(self, conversation_id: str) -> Optional[ConversationState]:
        return self._backend.get(conversation_id)

    def set(self, conversation_id: str, state: ConversationState) -> None:
        logger.debug(f"[STATE] {conversation_id} -> {state.flow}/{state.step}")
        self._backend.set(conversation_id, state)

    def clear(self, conversation_id: str) -> None:
        logger.debug(f"[STATE] {conversation_id} cleared")
        self._backend.delete(conversation_id)
