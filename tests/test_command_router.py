import asyncio

from walletbot.models.finance import Transaction
from walletbot.services.conversation.command_router import (
    ALREADY_LOGGED_IN,
    CARD_NOT_FOUND,
    NOT_UNDERSTOOD,
    UNKNOWN_COMMAND,
)


def _run(coro):
    return asyncio.run(coro)


CID = "chat-1"


def _send(manager, text):
    _run(manager.router.route(CID, text))


def _tx(card_id, title, tx_type, amount, date, **extra):
    return Transaction(card_id=card_id, title=title, type=tx_type, category="Food", amount=amount, date=date, **extra)


def test_start_greets_guest(manager, messenger):
    _send(manager, "/start")
    assert "/login" in messenger.last and "/signup" in messenger.last


def test_protected_command_requires_login(manager, api, messenger):
    _send(manager, "/cards")

    assert messenger.last == "❌ Please /login or /signup first to use this feature."
    assert manager.conversations.get(CID) is None


def test_unauthenticated_command_keeps_pending_login(manager, messenger):
    _send(manager, "/login")
    _send(manager, "/balance")

    assert manager.conversations.get(CID).flow == "login"


def test_login_refused_when_logged_in(manager, messenger, logged_in):
    _send(manager, "/login")

    assert messenger.last == ALREADY_LOGGED_IN
    assert manager.conversations.get(CID) is None


def test_logout_clears_session_and_flow(manager, messenger, logged_in):
    _send(manager, "/addcard")
    _send(manager, "/logout")

    assert manager.sessions.get(CID) is None
    assert manager.conversations.get(CID) is None
    assert messenger.last.startswith("👋 You have been logged out")


def test_logout_when_guest(manager, messenger):
    _send(manager, "/logout")
    assert messenger.last == "❌ You are not logged in."


def test_card_flow_without_cards(manager, messenger, logged_in):
    _send(manager, "/addtransaction")

    assert manager.conversations.get(CID) is None
    assert messenger.last.startswith("📭 You have no cards yet.")


def test_unknown_command(manager, messenger):
    _send(manager, "/fly")
    assert messenger.last == UNKNOWN_COMMAND


def test_free_text_without_flow_gets_help_hint(manager, messenger, logged_in):
    _send(manager, "hello there")
    assert messenger.last == NOT_UNDERSTOOD


def test_commands_are_case_insensitive(manager, messenger, logged_in, api):
    api.give_card("c1", "4111111111111111", 12.5)
    _send(manager, "/BALANCE")
    assert "Total Balance: 12.50 ₼" in messenger.last


def test_balance_sums_every_card(manager, messenger, logged_in, api):
    api.give_card("c1", "4111111111111111", 100)
    api.give_card("c2", "5500000000002222", 50.5)

    _send(manager, "/balance")

    assert "**** 1111" in messenger.last
    assert "**** 2222" in messenger.last
    assert "Total Balance: 150.50 ₼" in messenger.last


def test_transactions_view_with_single_card_skips_selection(manager, messenger, logged_in, api):
    api.give_card("c1", "4111111111111111", 100)
    api.transactions["c1"] = [_tx("c1", "Coffee", "cost", 3, "2026-01-05")]

    _send(manager, "/transactions")

    assert messenger.last.startswith("📋 *Transactions for Card **** 1111:*")
    assert "Coffee" in messenger.last


def test_transactions_view_with_several_cards_offers_list(manager, messenger, logged_in, api):
    api.give_card("c1", "4111111111111111", 100)
    api.give_card("c2", "5500000000002222", 50)

    _send(manager, "/scheduled")

    content = messenger.last
    assert content["type"] == "interactive"
    buttons = content["interactive"]["action"]["buttons"]
    assert [button["reply"]["id"] for button in buttons] == ["scheduled_c1", "scheduled_c2"]


def test_view_reply_shows_scheduled_summary(manager, messenger, logged_in, api):
    api.give_card("c2", "5500000000002222", 50)
    api.transactions["c2"] = [
        _tx("c2", "Rent", "cost", 40, "2999-01-01", scheduled=True, is_affect=False),
        _tx("c2", "Bonus", "income", 100, "2999-02-01", scheduled=True, is_affect=False),
    ]

    _send(manager, "scheduled_c2")

    assert "Scheduled Income: +100.00 ₼" in messenger.last
    assert "Scheduled Expense: -40.00 ₼" in messenger.last
    assert "Net Impact: 60.00 ₼" in messenger.last


def test_view_reply_for_missing_card(manager, messenger, logged_in):
    _send(manager, "view_tx_gone")
    assert messenger.last == CARD_NOT_FOUND


def test_view_reply_requires_login(manager, messenger):
    _send(manager, "view_tx_c1")
    assert messenger.last.startswith("❌ Please /login")


def test_limit_status_flags_overspending(manager, messenger, logged_in, api):
    from walletbot.core.timezone_helper import TimezoneHelper

    month = TimezoneHelper.current_month_key()
    api.give_card("c1", "4111111111111111", 100, limits=[{"month": month, "amount": 100}])
    api.give_card("c2", "5500000000002222", 100)
    api.transactions["c1"] = [
        _tx("c1", "TV", "cost", 150, f"{month}-01"),
        _tx("c1", "Trip", "cost", 500, "2999-01-01", scheduled=True, is_affect=False),
    ]

    _send(manager, "/limitstatus")

    assert "Spent: 150.00 ₼" in messenger.last
    assert "OVER LIMIT by 50.00 ₼" in messenger.last
    assert f"No limit set for {month}" in messenger.last


def test_stats_flow_sends_chart_image(manager, messenger, logged_in, api):
    from walletbot.core.timezone_helper import TimezoneHelper

    api.give_card("c1", "4111111111111111", 100)
    api.transactions["c1"] = [_tx("c1", "Coffee", "cost", 3, TimezoneHelper.today_iso())]

    _send(manager, "/stats")
    _send(manager, "stats_period_month")
    _send(manager, "stats_chart_category")

    content = messenger.last
    assert content["type"] == "image"
    assert content["image"]["caption"] == "📊 Spending by Category"
    assert manager.conversations.get(CID) is None


def test_stats_flow_without_data(manager, messenger, logged_in):
    _send(manager, "/stats")
    _send(manager, "all")
    _send(manager, "trend")

    assert messenger.last.startswith("📭 Not enough data")


def test_reply_shaped_like_a_view_id_goes_to_pending_flow(manager, messenger, logged_in, api):
    api.give_card("c1", "4111111111111111", 100)

    _send(manager, "/addwish")
    _send(manager, "scheduled_trip")

    state = manager.conversations.get(CID)
    assert state.step == "awaiting_wish_amount"
    assert state.data["name"] == "scheduled_trip"

    _send(manager, "100")

    assert ("add_card_wish", "c1", "scheduled_trip", 100.0) in api.calls
    assert manager.conversations.get(CID) is None
