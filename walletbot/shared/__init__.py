"""
Components shared across the bot.
"""

from .whatsapp import WhatsAppButtons, WhatsAppLists, WhatsAppHelper

__all__ = [
    'WhatsAppButtons',
    'WhatsAppLists',
    'WhatsAppHelper',
]
