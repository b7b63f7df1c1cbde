import pytest
from fastapi.testclient import TestClient

from walletbot.api.v1 import webhook
from walletbot.main import app
from walletbot.services.conversation import ConversationManager
from walletbot.services.whatsapp import WhatsAppAPIError


def _payload(message=None, statuses=None):
    value = {"messaging_product": "whatsapp", "metadata": {"phone_number_id": "123"}}
    if message:
        value["messages"] = [message]
    if statuses:
        value["statuses"] = statuses
    return {"object": "whatsapp_business_account", "entry": [{"id": "1", "changes": [{"field": "messages", "value": value}]}]}


def _text(body, message_id="wamid.1", sender="994501112233"):
    return {"from": sender, "id": message_id, "timestamp": "1760000000", "type": "text", "text": {"body": body}}


@pytest.fixture
def client(manager):
    app.dependency_overrides[webhook.get_conversation_manager] = lambda: manager
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_verification_handshake(client, monkeypatch):
    monkeypatch.setattr(webhook.settings, "VERIFY_TOKEN", "secret")

    response = client.get("/webhook", params={"hub.mode": "subscribe", "hub.verify_token": "secret", "hub.challenge": "42"})

    assert response.status_code == 200
    assert response.text == "42"


def test_verification_with_wrong_token(client, monkeypatch):
    monkeypatch.setattr(webhook.settings, "VERIFY_TOKEN", "secret")

    response = client.get("/webhook", params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "42"})

    assert response.status_code == 403


def test_text_message_is_processed(client, messenger):
    response = client.post("/webhook", json=_payload(_text("/start")))

    assert response.json() == {"status": "processed", "message_id": "wamid.1"}
    assert messenger.sent[0][0] == "994501112233"
    assert "Welcome" in messenger.last


def test_duplicate_message_is_ignored(client, messenger):
    client.post("/webhook", json=_payload(_text("/help")))
    response = client.post("/webhook", json=_payload(_text("/help")))

    assert response.json()["status"] == "ignored_duplicate"
    assert len(messenger.sent) == 1


def test_list_reply_is_routed_by_its_id(client, manager, api, messenger, logged_in):
    api.give_card("c1", "4111111111111111", 100)
    interactive = {
        "from": "chat-1", "id": "wamid.2", "timestamp": "1760000000", "type": "interactive",
        "interactive": {"type": "list_reply", "list_reply": {"id": "current_c1", "title": "Card **** 1111"}},
    }

    response = client.post("/webhook", json=_payload(interactive))

    assert response.json()["status"] == "processed"
    assert messenger.last == "📋 No current transactions for card **** 1111."


def test_unsupported_message_type(client):
    image = {"from": "994501112233", "id": "wamid.3", "timestamp": "1760000000", "type": "image", "image": {"id": "media"}}

    response = client.post("/webhook", json=_payload(image))

    assert response.json() == {"status": "ignored", "reason": "unsupported_type"}


def test_status_updates_are_acknowledged(client):
    statuses = [{"id": "wamid.1", "status": "delivered", "timestamp": "1760000000", "recipient_id": "994501112233"}]

    response = client.post("/webhook", json=_payload(statuses=statuses))

    assert response.json() == {"status": "status_received", "count": 1}


def test_whatsapp_rejection_maps_to_bad_gateway(api):
    class RejectingMessenger:
        async def send(self, conversation_id, content):
            raise WhatsAppAPIError("invalid recipient")

    manager = ConversationManager(api=api, messenger=RejectingMessenger())
    app.dependency_overrides[webhook.get_conversation_manager] = lambda: manager
    try:
        response = TestClient(app).post("/webhook", json=_payload(_text("/start")))
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 502
