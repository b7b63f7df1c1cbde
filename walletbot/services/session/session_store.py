import logging
from typing import Any, Dict, Optional, Union

from walletbot.models.session import Session
from .conversation_store import ConversationStateStore
from .store import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Maps a conversation identifier to an authenticated identity.

    A session exists if and only if the conversation is authenticated.
    Clearing a session also drops any pending flow of that conversation.
    """

    def __init__(
        self,
        conversations: ConversationStateStore,
        backend: Optional[KeyValueStore[Session]] = None,
    ):
        self.conversations = conversations
        self._backend = backend if backend is not None else InMemoryStore()

    def get(self, conversation_id: str) -> Optional[Session]:
        return self._backend.get(conversation_id)

    def set(self, conversation_id: str, identity: Union[Session, Dict[str, Any]]) -> Session:
        """Stores the identity, replacing any previous one. No merge."""
        session = identity if isinstance(identity, Session) else Session(**identity)
        self._backend.set(conversation_id, session)
        logger.info(f"[SESSION] Session established for {conversation_id} ({session.subject_id})")
        return session

    def clear(self, conversation_id: str) -> None:
        self._backend.delete(conversation_id)
        self.conversations.clear(conversation_id)
        logger.info(f"[SESSION] Session cleared for {conversation_id}")

    def is_authenticated(self, conversation_id: str) -> bool:
        return self._backend.contains(conversation_id)
