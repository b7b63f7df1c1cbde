import asyncio
import logging

from walletbot.core.timezone_helper import TimezoneHelper
from walletbot.models.session import ConversationState
from walletbot.services.conversation.engine import UNKNOWN_STEP_MESSAGE


def _run(coro):
    return asyncio.run(coro)


CID = "chat-1"


def _feed(manager, *texts):
    for text in texts:
        _run(manager.router.route(CID, text))


def test_add_card_flow_commits_and_clears_state(manager, api, messenger, logged_in):
    _feed(manager, "/addcard", "4111111111111111", "100")

    assert ("add_card", "uid-1", "4111111111111111", 100.0) in api.calls
    assert manager.conversations.get(CID) is None
    assert messenger.last == "✅ Card **** 1111 added successfully with balance 100.00 ₼!"


def test_card_number_with_spaces_is_normalised(manager, api, logged_in):
    _feed(manager, "/addcard", "4111 1111 1111 2222", "0")

    assert ("add_card", "uid-1", "4111111111112222", 0.0) in api.calls


def test_invalid_input_reprompts_without_touching_state(manager, messenger, logged_in):
    _feed(manager, "/addcard")
    before = manager.conversations.get(CID)

    _feed(manager, "411111111111111")

    after = manager.conversations.get(CID)
    assert after == before
    assert after.step == "awaiting_card_number"
    assert messenger.last.startswith("❌ Invalid card number")


def test_failed_commit_clears_state(manager, api, messenger, logged_in):
    api.write_error = "ledger unavailable"

    _feed(manager, "/addcard", "4111111111111111", "5")

    assert manager.conversations.get(CID) is None
    assert messenger.last == "❌ Failed to add card: ledger unavailable"


def test_commit_exception_clears_state(manager, api, messenger, logged_in):
    api.raise_on_write = RuntimeError("boom")

    _feed(manager, "/addcard", "4111111111111111", "5")

    assert manager.conversations.get(CID) is None
    assert messenger.last.startswith("❌ Something went wrong")


def test_progress_message_is_sent_before_outcome(manager, messenger, logged_in):
    _feed(manager, "/addcard", "4111111111111111", "5")

    texts = messenger.texts()
    assert texts[-2] == "⏳ Adding card..."


def test_starting_a_flow_discards_the_pending_one(manager, api, logged_in):
    api.give_card("c1", "4111111111111111", 50)
    _feed(manager, "/addcard", "/addwish")

    state = manager.conversations.get(CID)
    assert state.flow == "add_wish"
    assert state.step == "awaiting_wish_name"
    assert state.data["card_id"] == "c1"


def test_unknown_step_clears_state(manager, messenger):
    manager.conversations.set(CID, ConversationState(flow="add_card", step="awaiting_nothing"))

    handled = _run(manager.engine.handle_input(CID, "hello"))

    assert handled is True
    assert manager.conversations.get(CID) is None
    assert messenger.last == UNKNOWN_STEP_MESSAGE


def test_handle_input_without_flow_returns_false(manager):
    assert _run(manager.engine.handle_input(CID, "hello")) is False


def test_cancel(manager, messenger, logged_in):
    _feed(manager, "/addcard")
    assert manager.engine.has_pending_flow(CID)

    _feed(manager, "/cancel")
    assert not manager.engine.has_pending_flow(CID)
    assert messenger.last == "❌ Operation cancelled."

    _feed(manager, "/cancel")
    assert messenger.last == "ℹ️ There is nothing to cancel."


def test_transaction_flow_today(manager, api, messenger, logged_in):
    api.give_card("c1", "4111111111111111", 100)

    _feed(manager, "/addtransaction", "Coffee", "tx_type_cost", "tx_cat_Food", "3,5", "today")

    name, fields = api.calls[-1]
    assert name == "add_transaction"
    assert fields == {
        "card_id": "c1",
        "title": "Coffee",
        "tx_type": "cost",
        "category": "Food",
        "amount": 3.5,
        "date": TimezoneHelper.today_iso(),
    }
    assert messenger.last.startswith("✅ Transaction added!")
    assert "Scheduled" not in messenger.last


def test_transaction_flow_future_date_is_reported_as_scheduled(manager, api, messenger, logged_in):
    api.give_card("c1", "4111111111111111", 100)

    _feed(manager, "/addtransaction", "Salary", "income", "Salary", "1000", "2999-01-01")

    assert api.calls[-1][1]["tx_type"] == "income"
    assert "⏰ Scheduled" in messenger.last


def test_category_must_match_type(manager, messenger, logged_in, api):
    api.give_card("c1", "4111111111111111", 100)

    _feed(manager, "/addtransaction", "Coffee", "cost", "Salary")

    assert manager.conversations.get(CID).step == "awaiting_tx_category"
    assert messenger.last.startswith("❌ Invalid category")


def test_card_selection_with_several_cards(manager, api, logged_in):
    api.give_card("c1", "4111111111111111", 10)
    api.give_card("c2", "5500000000002222", 20)

    _feed(manager, "/addlimit")
    state = manager.conversations.get(CID)
    assert state.step == "awaiting_card"
    assert [option["number"] for option in state.data["card_options"]] == ["1111", "2222"]

    _feed(manager, "2222", "2026-01", "300")

    assert ("add_card_limit", "c2", "2026-01", 300.0) in api.calls


def test_login_flow_establishes_session(manager, api, messenger):
    _feed(manager, "/login", "ana@example.com", "secret1")

    assert ("sign_in", "ana@example.com", "secret1") in api.calls
    assert manager.sessions.get(CID).subject_id == "uid-1"
    assert messenger.last.startswith("✅ Welcome, *Ana*!")


def test_failed_login_keeps_guest(manager, api, messenger):
    api.auth_error = "INVALID_PASSWORD"

    _feed(manager, "/login", "ana@example.com", "wrong")

    assert manager.sessions.get(CID) is None
    assert manager.conversations.get(CID) is None
    assert messenger.last.startswith("❌ Login failed: INVALID_PASSWORD")


def test_signup_flow(manager, api):
    _feed(manager, "/signup", "Ana", "Lopez", "ana@example.com", "123")
    assert manager.conversations.get(CID).step == "awaiting_signup_password"

    _feed(manager, "secret1")

    assert ("sign_up", "ana@example.com", "secret1", "Ana", "Lopez") in api.calls
    assert manager.sessions.get(CID).surname == "Lopez"


def test_login_password_reaches_provider_unstripped(manager, api):
    _feed(manager, "/login", "ana@example.com", "  pass word  ")

    assert ("sign_in", "ana@example.com", "  pass word  ") in api.calls


def test_passwords_are_not_logged(manager, api, caplog):
    caplog.set_level(logging.DEBUG)

    _feed(manager, "/signup", "Ana", "Lopez", "ana@example.com", "abc12", "hunter2secret")

    assert ("sign_up", "ana@example.com", "hunter2secret", "Ana", "Lopez") in api.calls
    assert "abc12" not in caplog.text
    assert "hunter2secret" not in caplog.text
