from typing import List, Dict
from .buttons import WhatsAppButtons
from .lists import WhatsAppLists

class WhatsAppHelper:
    """
    Picks buttons or a list depending on how many options there are.
    """

    @staticmethod
    def create_interactive_response(text: str, options: List[Dict], button_text: str = "Select", section_title: str = "Options", force_list: bool = False) -> Dict:
        """
        Buttons for up to 3 options, a list otherwise.

        Args:
            text: Message body
            options: [{"id": "1", "title": "Option 1", "description": "..."}]
            button_text: List button label (lists only)
            section_title: Section title (lists only)
            force_list: Use a list even for few options

        Returns:
            Dict: Interactive message
        """
        if not options:
            raise ValueError("At least one option is required")

        use_buttons = WhatsAppButtons.can_use_buttons(len(options)) and not force_list

        if use_buttons:
            buttons = [{"id": opt["id"], "title": opt["title"]} for opt in options]
            return WhatsAppButtons.create_buttons_response(text, buttons)
        else:
            return WhatsAppLists.create_list_response(text, options, button_text, section_title)

    @staticmethod
    def create_simple_interactive(text: str, items: List[tuple], button_text: str = "Select", section_title: str = "Options", force_list: bool = False) -> Dict:
        """
        Same as create_interactive_response with (id, title) or
        (id, title, description) tuples.

        Example:
            WhatsAppHelper.create_simple_interactive(
                "Select transaction type:",
                [("tx_type_cost", "🔴 Cost"), ("tx_type_income", "🟢 Income")]
            )
        """
        options = []
        for item in items:
            if len(item) == 2:
                item_id, title = item
                description = ""
            elif len(item) == 3:
                item_id, title, description = item
            else:
                raise ValueError("Items must be 2 or 3 element tuples")

            options.append({
                "id": item_id,
                "title": title,
                "description": description
            })

        return WhatsAppHelper.create_interactive_response(
            text, options, button_text, section_title, force_list
        )
