from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from walletbot.core.config import get_settings
from walletbot.models.message import Message, WebhookPayload
from walletbot.services.whatsapp import WhatsAppAPIError
from walletbot.services.conversation import ConversationManager
import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook")
settings = get_settings()

# Process-wide conversation manager: sessions and pending flows live in it
conversation_manager = ConversationManager()


def get_conversation_manager() -> ConversationManager:
    return conversation_manager

# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("")
async def verify_webhook(
    hub_mode: str = Query("", alias="hub.mode"),
    hub_challenge: str = Query("", alias="hub.challenge"),
    hub_verify_token: str = Query("", alias="hub.verify_token"),
):
    """Meta webhook verification handshake."""
    if hub_mode == "subscribe" and hub_verify_token == settings.VERIFY_TOKEN:
        return PlainTextResponse(content=hub_challenge, status_code=200)

    raise HTTPException(status_code=403, detail="Verification failed")


@router.post("")
async def receive_update(
    payload: WebhookPayload,
    manager: ConversationManager = Depends(get_conversation_manager),
):
    """
    Receives WhatsApp updates.
    Single responsibility: orchestration and error mapping.
    """
    try:
        message_data = _extract_message_from_payload(payload)
        if not message_data:
            return {"status": "ignored", "reason": "no_valid_message"}

        if message_data.get("type") == "status_update":
            return _handle_status_update(message_data["statuses"])

        return await _process_chat_message(manager, message_data["message"])

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error processing webhook: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

# ============================================================================
# PAYLOAD PARSING
# ============================================================================

def _extract_message_from_payload(payload: WebhookPayload) -> Optional[Dict[str, Any]]:
    """First message or status batch of the payload, None when there is neither."""
    try:
        change = payload.entry[0].changes[0]
    except IndexError as e:
        logger.warning(f"Malformed webhook payload: {e}")
        return None

    if change.value.statuses:
        return {"type": "status_update", "statuses": change.value.statuses}

    if not change.value.messages:
        return None

    return {"type": "chat_message", "message": change.value.messages[0]}

# ============================================================================
# PROCESSING
# ============================================================================

async def _process_chat_message(manager: ConversationManager, message: Message) -> Dict[str, Any]:
    message_text = message.content

    if message_text is None:
        logger.warning(f"Unsupported message type: {message.type}")
        return {"status": "ignored", "reason": "unsupported_type"}

    if not message_text.strip():
        return {"status": "ignored", "reason": "empty_message"}

    try:
        processed = await manager.process_message(
            phone_number=message.from_,
            message_text=message_text,
            message_id=message.id,
        )
    except WhatsAppAPIError as exc:
        logger.error(f"Error sending WhatsApp message: {exc}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="WhatsApp API rejected the message"
        ) from exc

    if not processed:
        return {"status": "ignored_duplicate", "message_id": message.id}
    return {"status": "processed", "message_id": message.id}


def _handle_status_update(statuses: list) -> Dict[str, Any]:
    """Delivery statuses are only logged."""
    for status_update in statuses:
        logger.debug(f"Status update - ID: {status_update.id}, status: {status_update.status}")
    return {"status": "status_received", "count": len(statuses)}
