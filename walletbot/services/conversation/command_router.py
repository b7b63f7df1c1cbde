import logging
from typing import Awaitable, Callable, Dict, List, Optional

from walletbot.core.errors import AuthorizationError, NotFoundError
from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.models.finance import Card
from walletbot.models.session import Session
from walletbot.services.messaging import Messenger
from walletbot.services.reports.aggregates import limit_status
from walletbot.services.reports.formatter import ReportFormatter
from walletbot.services.session import SessionStore
from walletbot.shared.whatsapp import WhatsAppHelper, WhatsAppLists
from .button_handler import ButtonHandler, CardView
from .engine import ConversationEngine

logger = logging.getLogger(__name__)

NOT_LOGGED_IN = "Please /login or /signup first to use this feature."
ALREADY_LOGGED_IN = "✅ You are already logged in! Use /logout to sign out first."
UNKNOWN_COMMAND = "❓ Unknown command. Use /help to see the available commands."
NOT_UNDERSTOOD = "🤔 I didn't understand that. Use /help to see what I can do."
CARD_NOT_FOUND = "❌ Card not found. Use /cards to see your cards."

VIEW_PROMPTS = {
    CardView.TRANSACTIONS: "📋 Select a card to view transactions:",
    CardView.SCHEDULED: "📋 Select a card to view scheduled transactions:",
    CardView.CURRENT: "📋 Select a card to view current transactions:",
}


class CommandRouter:
    """
    Single responsibility: route each inbound text.

    /commands go to their handler and any other text to the pending flow,
    if any. Without a pending flow, card view list replies go to the button
    handler.
    """

    def __init__(
        self,
        engine: ConversationEngine,
        sessions: SessionStore,
        api,
        messenger: Messenger,
        button_handler: Optional[ButtonHandler] = None,
    ):
        self.engine = engine
        self.sessions = sessions
        self.api = api
        self.messenger = messenger
        self.button_handler = button_handler or ButtonHandler(api, messenger)

        self.commands: Dict[str, Callable[[str], Awaitable[None]]] = {
            "/start": self._start,
            "/help": self._help,
            "/login": self._login,
            "/signup": self._signup,
            "/logout": self._logout,
            "/cancel": self._cancel,
            "/cards": self._cards,
            "/addcard": self._add_card,
            "/balance": self._balance,
            "/transactions": lambda cid: self._card_view(cid, CardView.TRANSACTIONS),
            "/scheduled": lambda cid: self._card_view(cid, CardView.SCHEDULED),
            "/current": lambda cid: self._card_view(cid, CardView.CURRENT),
            "/addtransaction": lambda cid: self._start_card_flow(cid, "add_transaction"),
            "/limits": self._limits,
            "/addlimit": lambda cid: self._start_card_flow(cid, "add_limit"),
            "/limitstatus": self._limit_status,
            "/plans": self._plans,
            "/addplan": lambda cid: self._start_card_flow(cid, "add_plan"),
            "/wishes": self._wishes,
            "/addwish": lambda cid: self._start_card_flow(cid, "add_wish"),
            "/wishstatus": self._wish_status,
            "/stats": self._stats,
        }

    async def route(self, conversation_id: str, text: str) -> None:
        """
        Commands first, then the pending flow, then card view replies.

        The flow gets the text as received; stripping is only used to
        recognise commands and reply ids.
        """
        text = text or ""
        stripped = text.strip()

        try:
            if stripped.startswith("/"):
                await self._dispatch_command(conversation_id, stripped)
            elif self.engine.has_pending_flow(conversation_id):
                await self.engine.handle_input(conversation_id, text)
            elif self.button_handler.is_button_id(stripped):
                self._require_auth(conversation_id)
                await self.button_handler.handle_button(conversation_id, stripped)
            else:
                await self.messenger.send(conversation_id, NOT_UNDERSTOOD)

        except AuthorizationError as e:
            logger.info(f"[ROUTER] Unauthenticated request from {conversation_id}: '{stripped}'")
            await self.messenger.send(conversation_id, f"❌ {e.message}")
        except NotFoundError as e:
            logger.info(f"[ROUTER] Not found for {conversation_id}: {e.message}")
            await self.messenger.send(conversation_id, CARD_NOT_FOUND)

    async def _dispatch_command(self, conversation_id: str, text: str) -> None:
        command = text.split()[0].lower()
        handler = self.commands.get(command)
        if handler is None:
            await self.messenger.send(conversation_id, UNKNOWN_COMMAND)
            return
        logger.info(f"[ROUTER] {command} from {conversation_id}")
        await handler(conversation_id)

    # ==================== HELPERS ====================

    def _require_auth(self, conversation_id: str) -> Session:
        session = self.sessions.get(conversation_id)
        if session is None:
            raise AuthorizationError(NOT_LOGGED_IN)
        return session

    async def _load_cards(self, conversation_id: str) -> Optional[List[Card]]:
        """
        Cards of the signed in user.

        Returns:
            The cards, or None after telling the user there are none or
            that they could not be loaded
        """
        session = self._require_auth(conversation_id)
        result = await self.api.get_user_cards(session.subject_id)
        if not result.ok:
            await self.messenger.send(conversation_id, f"❌ Failed to load your cards: {result.error_message}")
            return None
        if not result.value:
            await self.messenger.send(conversation_id, ReportFormatter.no_cards())
            return None
        return result.value

    # ==================== ACCOUNT ====================

    async def _start(self, conversation_id: str) -> None:
        session = self.sessions.get(conversation_id)
        if session:
            await self.messenger.send(conversation_id, ReportFormatter.welcome_back(session.display_name))
        else:
            await self.messenger.send(conversation_id, ReportFormatter.welcome_guest())

    async def _help(self, conversation_id: str) -> None:
        authenticated = self.sessions.is_authenticated(conversation_id)
        await self.messenger.send(conversation_id, ReportFormatter.help_text(authenticated))

    async def _login(self, conversation_id: str) -> None:
        if self.sessions.is_authenticated(conversation_id):
            await self.messenger.send(conversation_id, ALREADY_LOGGED_IN)
            return
        await self.engine.start_flow(conversation_id, "login")

    async def _signup(self, conversation_id: str) -> None:
        if self.sessions.is_authenticated(conversation_id):
            await self.messenger.send(conversation_id, ALREADY_LOGGED_IN)
            return
        await self.engine.start_flow(conversation_id, "signup")

    async def _logout(self, conversation_id: str) -> None:
        if not self.sessions.is_authenticated(conversation_id):
            await self.messenger.send(conversation_id, "❌ You are not logged in.")
            return
        self.sessions.clear(conversation_id)
        await self.messenger.send(
            conversation_id,
            "👋 You have been logged out successfully.\n\n"
            "Use /login to sign in again or /signup to create a new account."
        )

    async def _cancel(self, conversation_id: str) -> None:
        if await self.engine.cancel(conversation_id):
            await self.messenger.send(conversation_id, "❌ Operation cancelled.")
        else:
            await self.messenger.send(conversation_id, "ℹ️ There is nothing to cancel.")

    # ==================== FLOWS ====================

    async def _add_card(self, conversation_id: str) -> None:
        session = self._require_auth(conversation_id)
        await self.engine.start_flow(conversation_id, "add_card", context={"user_id": session.subject_id})

    async def _start_card_flow(self, conversation_id: str, flow_name: str) -> None:
        session = self._require_auth(conversation_id)
        cards = await self._load_cards(conversation_id)
        if cards is None:
            return
        await self.engine.start_flow(
            conversation_id, flow_name, context={"user_id": session.subject_id}, cards=cards
        )

    async def _stats(self, conversation_id: str) -> None:
        session = self._require_auth(conversation_id)
        await self.engine.start_flow(conversation_id, "stats", context={"user_id": session.subject_id})

    # ==================== REPORTS ====================

    async def _cards(self, conversation_id: str) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is not None:
            await self.messenger.send(conversation_id, ReportFormatter.cards(cards))

    async def _balance(self, conversation_id: str) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is not None:
            await self.messenger.send(conversation_id, ReportFormatter.balance(cards))

    async def _limits(self, conversation_id: str) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is not None:
            await self.messenger.send(conversation_id, ReportFormatter.limits(cards))

    async def _plans(self, conversation_id: str) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is not None:
            await self.messenger.send(conversation_id, ReportFormatter.plans(cards))

    async def _wishes(self, conversation_id: str) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is not None:
            await self.messenger.send(conversation_id, ReportFormatter.wishes(cards))

    async def _wish_status(self, conversation_id: str) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is not None:
            await self.messenger.send(conversation_id, ReportFormatter.wish_status(cards))

    async def _limit_status(self, conversation_id: str) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is None:
            return

        month = TimezoneHelper.current_month_key()
        statuses = []
        for card in cards:
            if not any(limit.month == month for limit in card.limits):
                statuses.append((card, None))
                continue
            result = await self.api.get_card_transactions(card.id)
            if not result.ok:
                await self.messenger.send(conversation_id, f"❌ Failed to load transactions: {result.error_message}")
                return
            statuses.append((card, limit_status(card, result.value, month)))

        await self.messenger.send(conversation_id, ReportFormatter.limit_status(month, statuses))

    async def _card_view(self, conversation_id: str, view: CardView) -> None:
        cards = await self._load_cards(conversation_id)
        if cards is None:
            return

        if len(cards) == 1:
            await self.button_handler.show_view(conversation_id, view, cards[0])
            return

        options = [
            {"id": f"{view.value}{card.id}", "title": f"Card {card.masked_number}"}
            for card in cards[:WhatsAppLists.MAX_ROWS]
        ]
        await self.messenger.send(
            conversation_id,
            WhatsAppHelper.create_interactive_response(
                VIEW_PROMPTS[view], options, button_text="Cards", section_title="Your cards"
            ),
        )
