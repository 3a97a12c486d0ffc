"""Tests for the SendGrid email channel."""

import json

import httpx
import pytest

from eventlens.core.errors import ExternalServiceError
from eventlens.services.email import SENDGRID_SEND_URL, SendGridEmailChannel, render_html


def test_render_html_escapes_and_splits_paragraphs():
    rendered = render_html("Hi <you>", "First line\n\nSecond & last")
    assert rendered == "<h1>Hi &lt;you&gt;</h1><p>First line</p><p>Second &amp; last</p>"


def test_deliver_posts_to_sendgrid():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202)

    channel = SendGridEmailChannel("sg-key", "noreply@test", transport=httpx.MockTransport(handler))

    assert channel.deliver("guest@example.com", "Subject", "Body") is True

    request = requests[0]
    assert str(request.url) == SENDGRID_SEND_URL
    assert request.headers["Authorization"] == "Bearer sg-key"
    payload = json.loads(request.content)
    assert payload["personalizations"] == [{"to": [{"email": "guest@example.com"}]}]
    assert payload["from"] == {"email": "noreply@test"}
    assert payload["subject"] == "Subject"


def test_deliver_raises_on_error_status():
    channel = SendGridEmailChannel(
        "sg-key",
        "noreply@test",
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    with pytest.raises(ExternalServiceError):
        channel.deliver("guest@example.com", "Subject", "Body")


def test_deliver_raises_on_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    channel = SendGridEmailChannel("sg-key", "noreply@test", transport=httpx.MockTransport(handler))
    with pytest.raises(ExternalServiceError):
        channel.deliver("guest@example.com", "Subject", "Body")


def test_deliver_without_api_key():
    channel = SendGridEmailChannel("", "noreply@test")
    with pytest.raises(ExternalServiceError):
        channel.deliver("guest@example.com", "Subject", "Body")
