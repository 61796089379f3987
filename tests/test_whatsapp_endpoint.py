import asyncio
import time
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4

import httpx

from talkhub.main import app
from talkhub.services.errors import ConversationNotFoundError, GatewayDeliveryError, HubError
from talkhub.services.settings_service import HubSettings


def _upsert(message=None, from_me=False, event="messages.upsert"):
    return {
        "event": event,
        "instance": "iatende",
        "data": {
            "key": {"remoteJid": "5511999990000@s.whatsapp.net", "fromMe": from_me, "id": "ABC"},
            "pushName": "Maria",
            "message": message or {"conversation": "Olá"},
        },
    }


def _outcome(conversation, auto_reply=None):
    bot_message = SimpleNamespace(content=auto_reply) if auto_reply else None
    return SimpleNamespace(
        conversation=conversation,
        phone="5511999990000",
        bot_message=bot_message,
        auto_reply=auto_reply,
        hub_settings=HubSettings(api_url="https://evo.example.com", api_key="secret"),
    )


class TestWebhook:
    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_own_message_is_ignored(self, mock_process, client, db_session):
        response = client.post("/whatsapp/webhook", json=_upsert(from_me=True))

        assert response.status_code == 200
        assert response.json() == {"success": True, "ignored": True}
        mock_process.assert_not_called()
        db_session.commit.assert_not_called()

    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_other_events_store_nothing(self, mock_process, client):
        response = client.post("/whatsapp/webhook", json={"event": "connection.update", "data": {"state": "open"}})

        assert response.status_code == 200
        assert response.json() == {"success": True}
        mock_process.assert_not_called()

    @patch("talkhub.routers.whatsapp.deliver_auto_reply")
    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_inbound_message_returns_conversation_id(self, mock_process, mock_deliver, client, db_session, conversation):
        mock_process.return_value = _outcome(conversation)

        response = client.post("/whatsapp/webhook", json=_upsert())

        assert response.status_code == 200
        assert response.json() == {"success": True, "conversationId": str(conversation.id)}
        data = mock_process.call_args[0][1]
        assert data.key.remoteJid == "5511999990000@s.whatsapp.net"
        db_session.commit.assert_called_once()
        mock_deliver.assert_not_called()

    @patch("talkhub.routers.whatsapp.deliver_auto_reply")
    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_auto_reply_delivered_after_response(self, mock_process, mock_deliver, client, conversation):
        outcome = _outcome(conversation, auto_reply="A partir de R$ 10")
        mock_process.return_value = outcome

        response = client.post("/whatsapp/webhook", json=_upsert({"conversation": "qual o preço?"}))

        assert response.status_code == 200
        mock_deliver.assert_called_once_with(
            outcome.hub_settings, "5511999990000", "A partir de R$ 10", conversation.id
        )

    @patch("talkhub.services.webhook_service.EvolutionClient")
    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_auto_reply_failure_does_not_fail_webhook(self, mock_process, mock_client_class, client, conversation):
        mock_process.return_value = _outcome(conversation, auto_reply="Oi!")
        mock_client_class.return_value.send_text.side_effect = RuntimeError("gateway down")

        response = client.post("/whatsapp/webhook", json=_upsert())

        assert response.status_code == 200
        assert response.json()["success"] is True

    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_conversation_failure_returns_500(self, mock_process, client, db_session):
        mock_process.side_effect = HubError("Failed to create conversation")

        response = client.post("/whatsapp/webhook", json=_upsert())

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to create conversation"}
        db_session.rollback.assert_called_once()

    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_unexpected_error_returns_generic_500(self, mock_process, client):
        mock_process.side_effect = RuntimeError("db down")

        response = client.post("/whatsapp/webhook", json=_upsert())

        assert response.status_code == 500
        assert response.json() == {"error": "Internal error"}

    def test_invalid_json_returns_500(self, client):
        response = client.post(
            "/whatsapp/webhook", content=b"not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 500
        assert "error" in response.json()

    def test_upsert_without_key_returns_500(self, client):
        response = client.post("/whatsapp/webhook", json={"event": "messages.upsert", "data": {}})

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid webhook payload"}

    def test_get_answers_ok(self, client):
        response = client.get("/whatsapp/webhook")
        assert response.status_code == 200
        assert response.json()["ok"] is True


class TestSend:
    @patch("talkhub.routers.whatsapp.send_agent_message")
    def test_success(self, mock_send, client, db_session):
        mock_send.return_value = {"key": {"id": "MSG1"}}
        conversation_id = uuid4()
        agent_id = uuid4()

        response = client.post(
            "/whatsapp/send",
            json={"conversationId": str(conversation_id), "content": "Olá"},
            headers={"Authorization": f"Bearer {agent_id}"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"key": {"id": "MSG1"}}}
        send_request = mock_send.call_args[0][1]
        assert send_request.conversationId == conversation_id
        assert send_request.messageType == "text"
        assert mock_send.call_args[1]["sender_id"] == agent_id
        db_session.commit.assert_called_once()

    @patch("talkhub.routers.whatsapp.send_agent_message")
    def test_non_uuid_token_sends_without_sender(self, mock_send, client):
        mock_send.return_value = {}

        client.post(
            "/whatsapp/send",
            json={"conversationId": str(uuid4()), "content": "Olá"},
            headers={"Authorization": "Bearer eyJhbGciOi"},
        )

        assert mock_send.call_args[1]["sender_id"] is None

    @patch("talkhub.routers.whatsapp.send_agent_message")
    def test_unknown_conversation_returns_500(self, mock_send, client, db_session):
        mock_send.side_effect = ConversationNotFoundError("Phone number not found")

        response = client.post("/whatsapp/send", json={"conversationId": str(uuid4()), "content": "Olá"})

        assert response.status_code == 500
        assert response.json() == {"error": "Phone number not found"}
        db_session.commit.assert_not_called()

    @patch("talkhub.routers.whatsapp.send_agent_message")
    def test_gateway_failure_returns_500(self, mock_send, client):
        mock_send.side_effect = GatewayDeliveryError(status_code=502)

        response = client.post("/whatsapp/send", json={"conversationId": str(uuid4()), "content": "Olá"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to send message"}

    def test_invalid_message_type_returns_500(self, client):
        response = client.post(
            "/whatsapp/send",
            json={"conversationId": str(uuid4()), "content": "Olá", "messageType": "sticker"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid message payload"}


class TestUpload:
    def test_encodes_file(self, client):
        response = client.post(
            "/whatsapp/upload",
            files={"file": ("nota.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["file"] == {"name": "nota.pdf", "type": "application/pdf", "size": 8, "data": "JVBERi0xLjQ="}

    def test_missing_file_returns_500(self, client):
        response = client.post("/whatsapp/upload", data={"other": "x"})

        assert response.status_code == 500
        assert response.json() == {"error": "No file uploaded"}


class TestCors:
    def test_preflight_allows_any_origin(self, client):
        response = client.options(
            "/whatsapp/send",
            headers={
                "Origin": "https://dashboard.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


def _slow(result, delay=0.5):
    def _call(*args, **kwargs):
        time.sleep(delay)
        return result

    return _call


async def _health_while(request_coro_factory):
    """Run a request and, once it is in flight, time a GET /health next to it."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:

        async def timed_health():
            await asyncio.sleep(0.05)
            started = time.monotonic()
            response = await http.get("/health")
            return response, time.monotonic() - started

        return await asyncio.gather(request_coro_factory(http), timed_health())


class TestConcurrency:
    @patch("talkhub.routers.whatsapp.send_agent_message")
    def test_health_answers_while_send_waits_on_gateway(self, mock_send, override_db):
        mock_send.side_effect = _slow({"key": {"id": "MSG1"}})
        body = {"conversationId": str(uuid4()), "content": "Olá"}

        send_response, (health_response, latency) = asyncio.run(
            _health_while(lambda http: http.post("/whatsapp/send", json=body))
        )

        assert send_response.status_code == 200
        assert health_response.status_code == 200
        assert latency < 0.25

    @patch("talkhub.routers.whatsapp.process_inbound_message")
    def test_health_answers_while_webhook_stores_message(self, mock_process, override_db, conversation):
        mock_process.side_effect = _slow(_outcome(conversation))

        webhook_response, (health_response, latency) = asyncio.run(
            _health_while(lambda http: http.post("/whatsapp/webhook", json=_upsert()))
        )

        assert webhook_response.status_code == 200
        assert health_response.status_code == 200
        assert latency < 0.25
