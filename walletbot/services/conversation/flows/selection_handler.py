import logging
import re
from typing import Optional, Dict, List

logger = logging.getLogger(__name__)

class SelectionHandler:
    """
    Single responsibility: resolve which card option a reply refers to.

    Options are the dicts stored in the flow data under "card_options":
    {"id": "<card id>", "number": "<last 4 digits>", "balance": 0.0}
    """

    CARD_ID_PREFIX = "card_"

    @staticmethod
    def extract_user_selection(message: str, options_data: List[Dict]) -> Optional[Dict]:
        """
        Returns the selected option or None.

        Accepts the list reply id (card_<id>), the last four digits of the
        card number or the 1-based position in the list.
        """
        logger.debug(f"Extracting selection from: '{message}'")

        if not message:
            logger.warning("Empty selection message")
            return None

        message_clean = message.strip()

        # 1. List reply id
        selection = SelectionHandler._find_by_button_id(message_clean, options_data)
        if selection:
            return selection

        # 2. Last four digits ("1234" or "**** 1234")
        selection = SelectionHandler._find_by_last_digits(message_clean, options_data)
        if selection:
            return selection

        # 3. Position in the list
        selection = SelectionHandler._find_by_index(message_clean, options_data)
        if selection:
            return selection

        logger.warning(f"No selection matched: '{message}'")
        return None

    @staticmethod
    def _find_by_button_id(message: str, options_data: List[Dict]) -> Optional[Dict]:
        for option in options_data:
            if message == f"{SelectionHandler.CARD_ID_PREFIX}{option.get('id')}":
                logger.debug(f"Selection by id: {message}")
                return option
        return None

    @staticmethod
    def _find_by_last_digits(message: str, options_data: List[Dict]) -> Optional[Dict]:
        digits = re.sub(r"\D", "", message)
        if len(digits) != 4 or not re.fullmatch(r"[\s*\d]+", message):
            return None
        for option in options_data:
            if option.get("number") == digits:
                logger.debug(f"Selection by last digits: {digits}")
                return option
        return None

    @staticmethod
    def _find_by_index(message: str, options_data: List[Dict]) -> Optional[Dict]:
        try:
            selection = int(message)
            if 1 <= selection <= len(options_data):
                logger.debug(f"Selection by number: {selection}")
                return options_data[selection - 1]
        except ValueError:
            pass
        return None
