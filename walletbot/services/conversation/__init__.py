"""
Conversation handling for the WhatsApp bot.
"""

# Main entry point, used by the webhook
from .conversation_manager import ConversationManager

# Internal components (tests and wiring)
from .engine import ConversationEngine
from .command_router import CommandRouter
from .button_handler import ButtonHandler, CardView

__all__ = [
    "ConversationManager",
    "ConversationEngine",
    "CommandRouter",
    "ButtonHandler",
    "CardView",
]
