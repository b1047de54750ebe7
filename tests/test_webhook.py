import pytest

from app.api.webhook import (
    process_webhook_payload,
    simulate_image_webhook,
    simulate_webhook,
    verify_webhook,
)
from app.constants import get_template
from app.services.common.types import FeedbackStep
from tests.conftest import image_message, sent_texts, text_message

USER = "15551234567"


def payload(messages=None, statuses=None, field="messages", obj="whatsapp_business_account"):
    value = {"messaging_product": "whatsapp"}
    if messages is not None:
        value["messages"] = messages
    if statuses is not None:
        value["statuses"] = statuses
    return {
        "object": obj,
        "entry": [{"id": "entry-1", "changes": [{"field": field, "value": value}]}],
    }


class TestProcessWebhookPayload:
    @pytest.mark.asyncio
    async def test_messages_are_dispatched_in_order(self, dispatcher, store, messaging_client):
        await process_webhook_payload(
            payload(
                messages=[
                    text_message(USER, "hi"),
                    text_message(USER, "Alice"),
                    text_message(USER, "Great service"),
                ]
            ),
            dispatcher,
        )

        session = store.get(USER)
        assert session.step == FeedbackStep.AWAITING_IMAGE
        assert session.name == "Alice"
        assert session.feedback == "Great service"
        assert len(sent_texts(messaging_client)) == 3

    @pytest.mark.asyncio
    async def test_wrong_object_is_ignored(self, dispatcher, store, messaging_client):
        await process_webhook_payload(
            payload(messages=[text_message(USER, "hi")], obj="page"), dispatcher
        )

        assert USER not in store
        messaging_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_other_fields_are_ignored(self, dispatcher, store, messaging_client):
        await process_webhook_payload(
            payload(messages=[text_message(USER, "hi")], field="account_update"),
            dispatcher,
        )

        assert USER not in store
        messaging_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"object": "whatsapp_business_account"},
            {"object": "whatsapp_business_account", "entry": [{"id": "1"}]},
            {"object": "whatsapp_business_account", "entry": [{"changes": [{"field": "messages"}]}]},
            [],
            [{"object": "whatsapp_business_account"}],
            "whatsapp_business_account",
            {"object": "whatsapp_business_account", "entry": "x"},
            {"object": "whatsapp_business_account", "entry": ["x", None, 3]},
            {"object": "whatsapp_business_account", "entry": [{"changes": ["x"]}]},
            {"object": "whatsapp_business_account", "entry": [{"changes": {"field": "messages"}}]},
            {
                "object": "whatsapp_business_account",
                "entry": [{"changes": [{"field": "messages", "value": "oops"}]}],
            },
            {
                "object": "whatsapp_business_account",
                "entry": [{"changes": [{"field": "messages", "value": ["oops"]}]}],
            },
            {
                "object": "whatsapp_business_account",
                "entry": [
                    {
                        "changes": [
                            {
                                "field": "messages",
                                "value": {"messages": {"from": USER, "type": "text"}},
                            }
                        ]
                    }
                ],
            },
            {
                "object": "whatsapp_business_account",
                "entry": [
                    {
                        "changes": [
                            {
                                "field": "messages",
                                "value": {"messages": ["hi", 42], "statuses": "read"},
                            }
                        ]
                    }
                ],
            },
        ],
    )
    async def test_incomplete_payloads_are_ignored(self, dispatcher, messaging_client, body):
        await process_webhook_payload(body, dispatcher)

        messaging_client.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_statuses_are_observed_only(self, dispatcher, store, messaging_client, caplog):
        store.create(USER)

        await process_webhook_payload(
            payload(
                statuses=[
                    {"id": "wamid.1", "recipient_id": USER, "status": "delivered", "timestamp": "1"},
                    {"id": "wamid.1", "recipient_id": USER, "status": "read", "timestamp": "2"},
                ]
            ),
            dispatcher,
        )

        assert store.get(USER).step == FeedbackStep.AWAITING_NAME
        messaging_client.send_message.assert_not_awaited()
        assert "delivered" in caplog.text

    @pytest.mark.asyncio
    async def test_handler_failure_propagates(self, dispatcher, messaging_client):
        messaging_client.send_message.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await process_webhook_payload(
                payload(messages=[image_message(USER, "img-1")]), dispatcher
            )


class TestSimulation:
    @pytest.mark.asyncio
    async def test_simulate_text_and_image(self, dispatcher, store, sink, messaging_client):
        result = await simulate_webhook("hi", USER, dispatcher)
        assert result["success"] is True
        assert result["testMessage"] == "hi"
        assert result["phoneNumber"] == USER

        await simulate_webhook("Dana", USER, dispatcher)
        await simulate_webhook("Fast and friendly", USER, dispatcher)
        result = await simulate_image_webhook(USER, dispatcher)

        assert result["imageId"] == "test-image-123"
        assert USER not in store
        assert sink.records[0].profile_image_ref == "test-image-123"
        assert sent_texts(messaging_client)[-1] == get_template("completed", "Dana")


class TestVerifyWebhook:
    @pytest.mark.asyncio
    async def test_matching_token_echoes_challenge(self):
        response = await verify_webhook("subscribe", "secret", "12345", verify_token="secret")

        assert response.status_code == 200
        assert response.body == b"12345"

    @pytest.mark.asyncio
    async def test_wrong_token_is_rejected(self):
        response = await verify_webhook("subscribe", "nope", "12345", verify_token="secret")

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_empty_configured_token_is_rejected(self):
        response = await verify_webhook("subscribe", "", "12345", verify_token="")

        assert response.status_code == 403
