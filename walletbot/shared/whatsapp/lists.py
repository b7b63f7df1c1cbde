from typing import List, Dict

class WhatsAppLists:
    """
    Factory for WhatsApp list messages.
    Single responsibility: build list payloads the Cloud API accepts.
    """

    MAX_ROWS = 10                   # Rows allowed across all sections
    MAX_SECTION_TITLE_LENGTH = 24
    MAX_ROW_TITLE_LENGTH = 24
    MAX_ROW_DESCRIPTION_LENGTH = 72
    MAX_BUTTON_TEXT_LENGTH = 20

    @staticmethod
    def create_list_response(
        text: str,
        options: List[Dict],
        button_text: str = "Select",
        section_title: str = "Options"
    ) -> Dict:
        """
        Builds a single section list message.

        Args:
            text: Message body
            options: [{"id": "card_abc", "title": "**** 1234", "description": "..."}]
            button_text: Label of the button that opens the list
            section_title: Title of the section

        Returns:
            Dict: Interactive list message

        Raises:
            ValueError: No options, too many options or an option without id/title
        """
        if not options:
            raise ValueError("At least one option is required")

        if len(options) > WhatsAppLists.MAX_ROWS:
            raise ValueError(f"WhatsApp allows at most {WhatsAppLists.MAX_ROWS} rows, got {len(options)}")

        validated_rows = []
        for opt in options:
            if not opt.get("id") or not opt.get("title"):
                raise ValueError("Every option needs an 'id' and a 'title'")

            validated_rows.append({
                "id": opt["id"],
                "title": opt["title"][:WhatsAppLists.MAX_ROW_TITLE_LENGTH],
                "description": opt.get("description", "")[:WhatsAppLists.MAX_ROW_DESCRIPTION_LENGTH]
            })

        return {
            "type": "interactive",
            "interactive": {
                "type": "list",
                "body": {"text": text},
                "action": {
                    "button": button_text[:WhatsAppLists.MAX_BUTTON_TEXT_LENGTH],
                    "sections": [{
                        "title": section_title[:WhatsAppLists.MAX_SECTION_TITLE_LENGTH],
                        "rows": validated_rows
                    }]
                }
            }
        }
