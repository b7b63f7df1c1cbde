import httpx, logging
from typing import Dict, Optional
from walletbot.core.config import get_settings
logger = logging.getLogger(__name__)
settings = get_settings()

class WhatsAppAPIError(Exception):
    """The Cloud API rejected an outbound message."""

class WhatsAppClient:
    """
    Wraps the Cloud API calls.
    Single responsibility: send outbound messages.
    """
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = f"{settings.BASE_URL}/{settings.PHONE_ID}/messages"
        self.headers = {
            "Authorization": f"Bearer {settings.META_TOKEN}",
            "Content-Type": "application/json"
        }
        self.transport = transport

    @staticmethod
    def _envelope(to: str, message: Dict, reply_to: Optional[str]) -> Dict:
        """Cloud API body: recipient, message object and optional reply context."""
        payload = {"messaging_product": "whatsapp", "to": to, **message}
        if reply_to:
            payload["context"] = {"message_id": reply_to}
        return payload

    async def _post(self, payload: dict, kind: str) -> dict:
        async with httpx.AsyncClient(timeout=10, transport=self.transport) as client:
            try:
                r = await client.post(self.url, headers=self.headers, json=payload)
                r.raise_for_status()
                logger.debug(f"[WA] {kind} message sent to {payload.get('to')}")
            except httpx.HTTPStatusError as exc:
                logger.error("WA %s %s: %s", kind, exc.response.status_code, exc.response.text)
                raise WhatsAppAPIError(exc.response.text) from exc
        return r.json()

    async def send_text(self, to: str, text: str, reply_to: str | None = None):
        message = {"type": "text", "text": {"preview_url": False, "body": text}}
        return await self._post(self._envelope(to, message, reply_to), "text")

    async def send_interactive(self, to: str, interactive_data: dict, reply_to: str | None = None):
        """
        Sends buttons or a list.

        Args:
            to: Destination phone number
            interactive_data: {"type": "interactive", "interactive": {...}}
            reply_to: Message being answered (optional)
        """
        kind = interactive_data.get("interactive", {}).get("type", "unknown")
        return await self._post(self._envelope(to, interactive_data, reply_to), f"interactive/{kind}")

    async def send_image(self, to: str, image_data: dict, reply_to: str | None = None):
        """
        Sends an image by link (charts).

        Args:
            image_data: {"type": "image", "image": {"link": url, "caption": "..."}}
        """
        return await self._post(self._envelope(to, image_data, reply_to), "image")

    async def send_message(self, to: str, content, reply_to: str | None = None):
        """
        Sends text, interactive or image content depending on its shape.

        Args:
            to: Destination phone number
            content: str for text, dict for interactive or image messages
            reply_to: Message being answered (optional)
        """
        if isinstance(content, dict) and content.get("type") == "interactive":
            return await self.send_interactive(to, content, reply_to)
        elif isinstance(content, dict) and content.get("type") == "image":
            return await self.send_image(to, content, reply_to)
        else:
            return await self.send_text(to, str(content), reply_to)
