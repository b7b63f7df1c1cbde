"""
Process-wide stores keyed by conversation identifier.
"""

from .store import KeyValueStore, InMemoryStore
from .conversation_store import ConversationStateStore
from .session_store import SessionStore

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "ConversationStateStore",
    "SessionStore",
]
