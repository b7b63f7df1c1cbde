from typing import List, Dict

class WhatsAppButtons:
    """
    Factory for WhatsApp reply buttons.
    Single responsibility: build button payloads the Cloud API accepts.
    """

    MAX_BUTTONS = 3  # WhatsApp allows at most 3 buttons per message
    MAX_TITLE_LENGTH = 20

    @staticmethod
    def create_buttons_response(text: str, buttons: List[Dict]) -> Dict:
        """
        Builds a message with reply buttons.

        Args:
            text: Message body
            buttons: [{"id": "tx_type_cost", "title": "Cost"}, ...]

        Returns:
            Dict: Interactive button message

        Raises:
            ValueError: More than 3 buttons, none, or a button without id/title
        """
        if len(buttons) > WhatsAppButtons.MAX_BUTTONS:
            raise ValueError(f"WhatsApp allows at most {WhatsAppButtons.MAX_BUTTONS} buttons, got {len(buttons)}")

        if not buttons:
            raise ValueError("At least one button is required")

        validated_buttons = []
        for btn in buttons:
            if not btn.get("id") or not btn.get("title"):
                raise ValueError("Every button needs an 'id' and a 'title'")

            validated_buttons.append({
                "type": "reply",
                "reply": {
                    "id": btn["id"],
                    "title": btn["title"][:WhatsAppButtons.MAX_TITLE_LENGTH]
                }
            })

        return {
            "type": "interactive",
            "interactive": {
                "type": "button",
                "body": {"text": text},
                "action": {
                    "buttons": validated_buttons
                }
            }
        }

    @staticmethod
    def can_use_buttons(items_count: int) -> bool:
        """True when the options fit in buttons, otherwise a list is needed."""
        return items_count <= WhatsAppButtons.MAX_BUTTONS
