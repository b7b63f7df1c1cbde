import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from walletbot.services.whatsapp import WhatsAppClient

logger = logging.getLogger(__name__)

# Text, or a dict holding an interactive or image message
Content = Union[str, Dict]


class Messenger(ABC):
    """Outbound side of the conversation, keyed by conversation id."""

    @abstractmethod
    async def send(self, conversation_id: str, content: Content) -> None:
        ...


class WhatsAppMessenger(Messenger):
    """Messenger backed by the WhatsApp Cloud API. The conversation id is the phone number."""

    def __init__(self, client: Optional[WhatsAppClient] = None):
        self.client = client or WhatsAppClient()

    async def send(self, conversation_id: str, content: Content) -> None:
        await self.client.send_message(to=conversation_id, content=content)
