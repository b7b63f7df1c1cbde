import logging
from collections import deque
from typing import Optional

from walletbot.services.external import FinanceApi
from walletbot.services.messaging import Messenger, WhatsAppMessenger
from walletbot.services.session import ConversationStateStore, SessionStore
from .command_router import CommandRouter
from .engine import ConversationEngine
from .flows import build_flows

logger = logging.getLogger(__name__)

PROCESSED_IDS_KEPT = 1000


class ConversationManager:
    """
    Single responsibility: wire the conversation components together and
    process one inbound message at a time.
    """

    def __init__(
        self,
        api: Optional[FinanceApi] = None,
        messenger: Optional[Messenger] = None,
        sessions: Optional[SessionStore] = None,
        conversations: Optional[ConversationStateStore] = None,
    ):
        self.api = api or FinanceApi()
        self.messenger = messenger or WhatsAppMessenger()
        self.conversations = conversations or ConversationStateStore()
        self.sessions = sessions or SessionStore(self.conversations)

        self.flows = build_flows(self.api, self.sessions)
        self.engine = ConversationEngine(self.flows, self.conversations, self.messenger)
        self.router = CommandRouter(self.engine, self.sessions, self.api, self.messenger)

        # WhatsApp may deliver the same message more than once
        self._processed_ids = deque(maxlen=PROCESSED_IDS_KEPT)

    async def process_message(self, phone_number: str, message_text: str, message_id: Optional[str] = None) -> bool:
        """
        Processes an inbound message; replies go out through the messenger.

        Returns:
            bool: False when the message was a duplicate and was skipped
        """
        if message_id:
            if message_id in self._processed_ids:
                logger.info(f"Duplicate message skipped: {message_id}")
                return False
            self._processed_ids.append(message_id)

        logger.info(f"Processing message from {phone_number}")
        await self.router.route(phone_number, message_text)
        return True

    async def close(self):
        """Closes the manager resources."""
        try:
            await self.api.close()
            logger.debug("Resources closed")
        except Exception as e:
            logger.error(f"Error closing resources: {e}")
