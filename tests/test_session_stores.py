import pytest

from walletbot.core.errors import NotFoundError
from walletbot.models.finance import Card
from walletbot.models.session import ConversationState, Session
from walletbot.services.conversation.flows import CARD_STEP, enter_flow
from walletbot.services.session import ConversationStateStore, SessionStore


@pytest.fixture
def conversations():
    return ConversationStateStore()


@pytest.fixture
def sessions(conversations):
    return SessionStore(conversations)


def test_session_set_replaces_without_merge(sessions):
    sessions.set("chat-1", {"subject_id": "uid-1", "email": "a@example.com", "display_name": "Ana"})
    sessions.set("chat-1", Session(subject_id="uid-2", email="b@example.com"))

    session = sessions.get("chat-1")
    assert session.subject_id == "uid-2"
    assert session.display_name == ""
    assert sessions.is_authenticated("chat-1")


def test_session_clear_drops_pending_flow(sessions, conversations):
    sessions.set("chat-1", Session(subject_id="uid-1", email="a@example.com"))
    conversations.set("chat-1", ConversationState(flow="add_card", step="awaiting_card_number"))

    sessions.clear("chat-1")

    assert not sessions.is_authenticated("chat-1")
    assert conversations.get("chat-1") is None


def test_conversations_are_independent(conversations):
    conversations.set("chat-1", ConversationState(flow="login", step="awaiting_login_email"))
    conversations.set("chat-2", ConversationState(flow="signup", step="awaiting_signup_name"))

    conversations.clear("chat-1")

    assert conversations.get("chat-1") is None
    assert conversations.get("chat-2").flow == "signup"


def test_advance_does_not_mutate():
    state = ConversationState(flow="add_card", step="awaiting_card_number", data={"user_id": "uid-1"})

    advanced = state.advance("awaiting_card_amount", {**state.data, "card_number": "4111111111111111"})

    assert state.step == "awaiting_card_number"
    assert "card_number" not in state.data
    assert advanced.data["card_number"] == "4111111111111111"


def _cards(count):
    return [Card(id=f"c{i}", card_number=f"411111111111{i:04d}", current_amount=i) for i in range(1, count + 1)]


def test_enter_flow_with_one_card_skips_selection():
    state = enter_flow(_cards(1), "add_wish", {"user_id": "uid-1"})

    assert state.step == "awaiting_wish_name"
    assert state.data == {"user_id": "uid-1", "card_id": "c1"}


def test_enter_flow_with_several_cards_asks_for_one():
    state = enter_flow(_cards(3), "add_plan")

    assert state.step == CARD_STEP
    assert [option["id"] for option in state.data["card_options"]] == ["c1", "c2", "c3"]
    assert "card_id" not in state.data


def test_enter_flow_without_cards():
    with pytest.raises(NotFoundError):
        enter_flow([], "add_transaction")


def test_enter_flow_unknown():
    with pytest.raises(ValueError):
        enter_flow(_cards(1), "teleport")


def test_flow_without_card_scope_ignores_cards():
    assert enter_flow(None, "login").step == "awaiting_login_email"
