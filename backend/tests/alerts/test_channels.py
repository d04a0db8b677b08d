"""Tests for notification channels."""

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import httpx
import pytest
from livemetrics.alerts.channels import (
    DeliveryResult,
    EmailChannel,
    LogChannel,
    NotificationChannel,
    SlackChannel,
    WebhookChannel,
)
from livemetrics.alerts.models import AlertCondition, AlertEvent, AlertSeverity

from tests.factories import at

# Test fixtures for SMTP authentication (not real credentials)
TEST_SMTP_USER = "user"
TEST_SMTP_CRED = "test-cred-1234"


def _create_test_alert(severity: AlertSeverity = AlertSeverity.CRITICAL) -> AlertEvent:
    """Create a test alert event."""
    return AlertEvent(
        rule_id="rule-1",
        triggered_at=at(0),
        metric_value=2.4,
        severity=severity,
        message="High Error Rate: Error Rate is 2.4% (greater_than 2.0%)",
        rule_name="High Error Rate",
        metric_id="error_rate",
        condition=AlertCondition.GREATER_THAN,
        threshold=2.0,
    )


def _mock_client(response=None, error=None) -> MagicMock:
    client = MagicMock()
    if error is not None:
        client.post = AsyncMock(side_effect=error)
    else:
        client.post = AsyncMock(return_value=response)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


class TestNotificationChannel:
    """Tests for NotificationChannel abstract base class."""

    def test_notification_channel_is_abstract(self):
        with pytest.raises(TypeError):
            NotificationChannel()

    def test_subclass_must_implement_send(self):
        class IncompleteChannel(NotificationChannel):
            pass

        with pytest.raises(TypeError):
            IncompleteChannel()


class TestEmailChannel:
    """Tests for EmailChannel."""

    def _channel(self) -> EmailChannel:
        return EmailChannel(
            smtp_host="smtp.test",
            smtp_port=587,
            sender="alerts@livemetrics.test",
            username=TEST_SMTP_USER,
            password=TEST_SMTP_CRED,
        )

    def test_build_message(self):
        message = self._channel().build_message(_create_test_alert(), "ops@company.com")

        assert message["Subject"] == "[CRITICAL] High Error Rate"
        assert message["To"] == "ops@company.com"
        body = message.get_content()
        assert "Metric: error_rate" in body
        assert "Condition: greater_than 2.0" in body

    @pytest.mark.asyncio
    async def test_send_success(self):
        with patch("livemetrics.alerts.channels.aiosmtplib.send", new=AsyncMock()) as send:
            result = await self._channel().send(_create_test_alert(), "ops@company.com")

        assert result == DeliveryResult(success=True, response_code=250)
        kwargs = send.await_args.kwargs
        assert kwargs["hostname"] == "smtp.test"
        assert kwargs["username"] == TEST_SMTP_USER

    @pytest.mark.asyncio
    async def test_send_smtp_error(self):
        error = aiosmtplib.SMTPException("relay denied")
        with patch("livemetrics.alerts.channels.aiosmtplib.send", new=AsyncMock(side_effect=error)):
            result = await self._channel().send(_create_test_alert(), "ops@company.com")

        assert result.success is False
        assert "relay denied" in result.error_message


class TestWebhookChannel:
    """Tests for WebhookChannel."""

    def test_build_payload(self):
        payload = WebhookChannel().build_payload(_create_test_alert())

        assert payload["text"].startswith(":fire: [CRITICAL] High Error Rate")
        attachment = payload["attachments"][0]
        assert attachment["color"] == "#ff0000"
        assert {"title": "Metric", "value": "error_rate", "short": True} in attachment["fields"]

    @pytest.mark.asyncio
    async def test_send_success(self):
        response = MagicMock(status_code=200)
        client = _mock_client(response)
        with patch("livemetrics.alerts.channels.httpx.AsyncClient", return_value=client):
            result = await WebhookChannel().send(_create_test_alert(), "https://hooks.test/x")

        assert result.success is True
        assert result.response_code == 200
        assert client.post.await_args.args[0] == "https://hooks.test/x"

    @pytest.mark.asyncio
    async def test_send_http_error(self):
        request = httpx.Request("POST", "https://hooks.test/x")
        response = httpx.Response(500, request=request)
        client = _mock_client(response)
        with patch("livemetrics.alerts.channels.httpx.AsyncClient", return_value=client):
            result = await WebhookChannel().send(_create_test_alert(), "https://hooks.test/x")

        assert result.success is False
        assert result.response_code == 500

    @pytest.mark.asyncio
    async def test_send_timeout(self):
        client = _mock_client(error=httpx.ReadTimeout("slow"))
        with patch("livemetrics.alerts.channels.httpx.AsyncClient", return_value=client):
            result = await WebhookChannel().send(_create_test_alert(), "https://hooks.test/x")

        assert result == DeliveryResult(success=False, error_message="Request timed out")


class TestSlackChannel:
    """Tests for SlackChannel."""

    @pytest.mark.asyncio
    async def test_posts_to_configured_url_with_channel(self):
        client = _mock_client(MagicMock(status_code=200))
        channel = SlackChannel("https://hooks.slack.test/T000")
        with patch("livemetrics.alerts.channels.httpx.AsyncClient", return_value=client):
            result = await channel.send(_create_test_alert(), "#alerts")

        assert result.success is True
        url = client.post.await_args.args[0]
        payload = client.post.await_args.kwargs["json"]
        assert url == "https://hooks.slack.test/T000"
        assert payload["channel"] == "#alerts"


class TestLogChannel:
    """Tests for LogChannel."""

    @pytest.mark.asyncio
    async def test_logs_at_severity_level(self, caplog):
        with caplog.at_level(logging.INFO, logger="livemetrics.alerts.channels"):
            result = await LogChannel().send(_create_test_alert(AlertSeverity.MEDIUM), "#alerts")

        assert result.success is True
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert "High Error Rate" in record.getMessage()
