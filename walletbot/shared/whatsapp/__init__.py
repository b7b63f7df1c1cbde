"""
Builders for WhatsApp interactive messages within the Cloud API limits.
"""

from .buttons import WhatsAppButtons
from .lists import WhatsAppLists
from .helper import WhatsAppHelper

__all__ = [
    'WhatsAppButtons',
    'WhatsAppLists',
    'WhatsAppHelper',
]
