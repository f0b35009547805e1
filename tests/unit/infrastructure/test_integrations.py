"""Unit tests for the SendGrid and Mailchimp HTTP clients.

Outbound calls go through ``httpx.MockTransport`` so the exact requests the
clients build can be inspected without touching the network.
"""

import hashlib
from collections.abc import Callable

import httpx
import orjson
import pytest

from mutuals.core.config import EmailConfig, MailingListConfig
from mutuals.core.exceptions import UpstreamError
from mutuals.infrastructure.integrations import (
    EmailClient,
    MailingListClient,
    subscriber_hash,
)

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


def _mailing_list_config() -> MailingListConfig:
    return MailingListConfig(api_key="key-us6", server_prefix="us6", list_id="list123")


@pytest.mark.unit
class TestEmailClient:
    """Test suite for EmailClient."""

    async def test_send_posts_sendgrid_payload(self) -> None:
        """Test that a message is posted with bearer auth and HTML content."""
        # Arrange
        transport = RecordingTransport(lambda _: httpx.Response(202))
        config = EmailConfig(sendgrid_api_key="SG.test", email_from="from@mutuals.plus")

        async with httpx.AsyncClient(transport=transport) as http:
            client = EmailClient(config, http)

            # Act
            await client.send("reader@example.com", "Hello", "<p>Hi</p>")

        # Assert
        request = transport.requests[0]
        payload = orjson.loads(request.content)
        assert str(request.url) == config.api_url
        assert request.headers["Authorization"] == "Bearer SG.test"
        assert payload["personalizations"] == [
            {"to": [{"email": "reader@example.com"}]}
        ]
        assert payload["from"] == {"email": "from@mutuals.plus"}
        assert payload["content"] == [{"type": "text/html", "value": "<p>Hi</p>"}]

    async def test_send_without_api_key_raises(self) -> None:
        """Test that an unconfigured client refuses to send."""
        async with httpx.AsyncClient() as http:
            client = EmailClient(EmailConfig(), http)

            with pytest.raises(UpstreamError, match="Email service not configured"):
                await client.send("reader@example.com", "Hello", "<p>Hi</p>")

        assert client.is_configured is False

    async def test_rejected_send_raises_upstream_error(self) -> None:
        """Test that an error status from SendGrid becomes UpstreamError."""
        # Arrange
        transport = RecordingTransport(lambda _: httpx.Response(401))
        config = EmailConfig(sendgrid_api_key="SG.bad")

        async with httpx.AsyncClient(transport=transport) as http:
            client = EmailClient(config, http)

            # Act & Assert
            with pytest.raises(UpstreamError) as exc_info:
                await client.send("reader@example.com", "Hello", "<p>Hi</p>")

        assert exc_info.value.context == {"service": "sendgrid", "status_code": 401}

    async def test_welcome_email_escapes_name(self) -> None:
        """Test that subscriber names are HTML-escaped in the welcome email."""
        # Arrange
        transport = RecordingTransport(lambda _: httpx.Response(202))
        config = EmailConfig(sendgrid_api_key="SG.test")

        async with httpx.AsyncClient(transport=transport) as http:
            client = EmailClient(config, http)

            # Act
            await client.send_welcome_email("reader@example.com", "<b>Ada</b>")

        # Assert
        payload = orjson.loads(transport.requests[0].content)
        html = payload["content"][0]["value"]
        assert payload["subject"] == "Welcome to Mutuals+ Newsletter!"
        assert "&lt;b&gt;Ada&lt;/b&gt;" in html
        assert "<b>Ada</b>" not in html

    async def test_contact_notification_goes_to_team_inbox(self) -> None:
        """Test that contact notifications are addressed to the info inbox."""
        # Arrange
        transport = RecordingTransport(lambda _: httpx.Response(202))
        config = EmailConfig(sendgrid_api_key="SG.test", email_info="team@mutuals.plus")

        async with httpx.AsyncClient(transport=transport) as http:
            client = EmailClient(config, http)

            # Act
            await client.send_contact_notification(
                "Ada Lovelace", "ada@example.com", "Hello there"
            )

        # Assert
        payload = orjson.loads(transport.requests[0].content)
        assert payload["personalizations"][0]["to"] == [{"email": "team@mutuals.plus"}]
        assert payload["subject"] == "New Contact Form Submission: No Subject"


@pytest.mark.unit
class TestMailingListClient:
    """Test suite for MailingListClient."""

    def test_subscriber_hash_is_md5_of_lowercase_email(self) -> None:
        """Test the Mailchimp member id derivation."""
        expected = hashlib.md5(b"reader@example.com").hexdigest()  # noqa: S324

        assert subscriber_hash("Reader@Example.com") == expected

    async def test_unconfigured_client_skips_calls(self) -> None:
        """Test that nothing is sent when Mailchimp is not configured."""
        transport = RecordingTransport(lambda _: httpx.Response(200))

        async with httpx.AsyncClient(transport=transport) as http:
            client = MailingListClient(MailingListConfig(), http)

            added = await client.add_subscriber("reader@example.com")
            member = await client.get_subscriber("reader@example.com")

        assert added is False
        assert member is None
        assert transport.requests == []

    async def test_add_subscriber_posts_member(self) -> None:
        """Test that a new member is posted to the audience."""
        # Arrange
        transport = RecordingTransport(lambda _: httpx.Response(200, json={}))

        async with httpx.AsyncClient(transport=transport) as http:
            client = MailingListClient(_mailing_list_config(), http)

            # Act
            added = await client.add_subscriber("reader@example.com", "Ada", "FOOTER")

        # Assert
        request = transport.requests[0]
        payload = orjson.loads(request.content)
        assert added is True
        assert request.method == "POST"
        assert str(request.url) == (
            "https://us6.api.mailchimp.com/3.0/lists/list123/members"
        )
        assert payload == {
            "email_address": "reader@example.com",
            "status": "subscribed",
            "merge_fields": {"FNAME": "Ada"},
            "tags": ["FOOTER"],
        }

    async def test_existing_member_is_updated_instead(self) -> None:
        """Test that a Member Exists response falls back to a PATCH."""

        # Arrange
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(400, json={"title": "Member Exists"})
            return httpx.Response(200, json={})

        transport = RecordingTransport(handler)

        async with httpx.AsyncClient(transport=transport) as http:
            client = MailingListClient(_mailing_list_config(), http)

            # Act
            added = await client.add_subscriber("reader@example.com", "Ada")

        # Assert
        patch = transport.requests[1]
        assert added is True
        assert patch.method == "PATCH"
        assert patch.url.path.endswith(f"/members/{subscriber_hash('reader@example.com')}")
        assert orjson.loads(patch.content) == {
            "status": "subscribed",
            "merge_fields": {"FNAME": "Ada"},
        }

    async def test_network_failure_reports_false(self) -> None:
        """Test that transport errors are logged and reported, never raised."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        async with httpx.AsyncClient(transport=RecordingTransport(handler)) as http:
            client = MailingListClient(_mailing_list_config(), http)

            added = await client.add_subscriber("reader@example.com")
            unsubscribed = await client.unsubscribe_subscriber("reader@example.com")

        assert added is False
        assert unsubscribed is False

    async def test_unknown_member_reads_as_none(self) -> None:
        """Test that a 404 lookup returns None."""
        transport = RecordingTransport(lambda _: httpx.Response(404))

        async with httpx.AsyncClient(transport=transport) as http:
            client = MailingListClient(_mailing_list_config(), http)

            member = await client.get_subscriber("reader@example.com")

        assert member is None
