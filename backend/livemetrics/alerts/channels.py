"""Notification channel implementations.

This module provides:
- DeliveryResult: Result dataclass for notification delivery
- NotificationChannel: Abstract base class for notification channels
- EmailChannel: SMTP-based email notification channel
- WebhookChannel: HTTP webhook notification channel (Slack-compatible)
- SlackChannel: Slack incoming webhook, routed by channel name
- LogChannel: Writes alerts to the application log
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage

import aiosmtplib
import httpx

from livemetrics.alerts.models import AlertEvent, AlertSeverity

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    """Result of a notification delivery attempt.

    Attributes:
        success: Whether the delivery succeeded
        response_code: HTTP status code or SMTP response code (if applicable)
        error_message: Error message if delivery failed
    """

    success: bool
    response_code: int | None = None
    error_message: str | None = None


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    All notification channels must implement the send() method.
    """

    @abstractmethod
    async def send(self, alert: AlertEvent, destination: str) -> DeliveryResult:
        """Send a notification for the given alert.

        Args:
            alert: The alert event to notify about
            destination: Channel-specific destination (email address, webhook URL, etc.)

        Returns:
            DeliveryResult indicating success or failure
        """
        pass


def _subject(alert: AlertEvent) -> str:
    return f"[{alert.severity.value.upper()}] {alert.rule_name or alert.rule_id}"


class EmailChannel(NotificationChannel):
    """SMTP-based email notification channel.

    Sends email notifications with subject format "[SEVERITY] {rule name}".
    """

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
    ):
        """Initialize the email channel.

        Args:
            smtp_host: SMTP server hostname
            smtp_port: SMTP server port
            sender: Sender email address
            username: SMTP authentication username (optional)
            password: SMTP authentication password (optional)
            use_tls: Whether to use STARTTLS (default: True)
        """
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls

    def build_message(self, alert: AlertEvent, destination: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = _subject(alert)
        message["From"] = self.sender
        message["To"] = destination

        body_lines = [
            f"Alert: {alert.message}",
            f"Rule: {alert.rule_name} ({alert.rule_id})",
            f"Metric: {alert.metric_id}",
            f"Value: {alert.metric_value}",
            f"Severity: {alert.severity.value}",
            f"Time: {alert.triggered_at.isoformat()}",
        ]
        if alert.condition is not None:
            body_lines.append(f"Condition: {alert.condition.value} {alert.threshold}")
        if alert.change_percent is not None:
            body_lines.append(f"Change: {alert.change_percent:+.2f}%")
        body_lines.append(f"Event ID: {alert.event_id}")

        message.set_content("\n".join(body_lines))
        return message

    async def send(self, alert: AlertEvent, destination: str) -> DeliveryResult:
        """Send an email notification.

        Args:
            alert: The alert event to notify about
            destination: Recipient email address

        Returns:
            DeliveryResult with success=True and response_code=250 on success,
            or success=False with error_message on failure
        """
        message = self.build_message(alert, destination)
        try:
            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.username,
                password=self.password,
                start_tls=self.use_tls,
            )
            return DeliveryResult(success=True, response_code=250)
        except aiosmtplib.SMTPException as e:
            return DeliveryResult(success=False, error_message=str(e))


class WebhookChannel(NotificationChannel):
    """HTTP webhook notification channel.

    Sends Slack-compatible JSON payloads via POST request to the target URL.
    """

    SEVERITY_EMOJI = {
        AlertSeverity.CRITICAL: ":fire:",
        AlertSeverity.HIGH: ":rotating_light:",
        AlertSeverity.MEDIUM: ":warning:",
        AlertSeverity.LOW: ":information_source:",
    }

    SEVERITY_COLOR = {
        AlertSeverity.CRITICAL: "#ff0000",
        AlertSeverity.HIGH: "#ff6600",
        AlertSeverity.MEDIUM: "#ffcc00",
        AlertSeverity.LOW: "#439fe0",
    }

    def __init__(self, timeout_seconds: float = 10.0):
        """Initialize the webhook channel.

        Args:
            timeout_seconds: HTTP request timeout (default: 10.0 seconds)
        """
        self.timeout_seconds = timeout_seconds

    def build_payload(self, alert: AlertEvent) -> dict:
        emoji = self.SEVERITY_EMOJI.get(alert.severity, "")
        fields = [
            {"title": "Metric", "value": alert.metric_id, "short": True},
            {"title": "Value", "value": str(alert.metric_value), "short": True},
            {"title": "Time", "value": alert.triggered_at.isoformat(), "short": True},
        ]
        return {
            "text": f"{emoji} {_subject(alert)} {alert.message}",
            "attachments": [
                {
                    "color": self.SEVERITY_COLOR.get(alert.severity, "#cccccc"),
                    "fields": fields,
                }
            ],
        }

    async def send(self, alert: AlertEvent, destination: str) -> DeliveryResult:
        """Send a webhook notification.

        Args:
            alert: The alert event to notify about
            destination: Webhook URL

        Returns:
            DeliveryResult with success=True and HTTP status code on success,
            or success=False with error details on failure
        """
        return await self._post(destination, self.build_payload(alert))

    async def _post(self, url: str, payload: dict) -> DeliveryResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, json=payload)
                response.raise_for_status()
                return DeliveryResult(success=True, response_code=response.status_code)
        except httpx.TimeoutException:
            return DeliveryResult(
                success=False,
                error_message="Request timed out",
            )
        except httpx.HTTPStatusError as e:
            return DeliveryResult(
                success=False,
                response_code=e.response.status_code,
                error_message=str(e),
            )
        except httpx.RequestError as e:
            return DeliveryResult(
                success=False,
                error_message=str(e),
            )


class SlackChannel(WebhookChannel):
    """Slack incoming-webhook channel.

    Rule targets for Slack are channel names ("#alerts"); every message is
    posted to one configured webhook URL with the channel set in the payload.
    """

    def __init__(self, webhook_url: str, timeout_seconds: float = 10.0):
        super().__init__(timeout_seconds=timeout_seconds)
        self.webhook_url = webhook_url

    async def send(self, alert: AlertEvent, destination: str) -> DeliveryResult:
        payload = self.build_payload(alert)
        payload["channel"] = destination
        return await self._post(self.webhook_url, payload)


class LogChannel(NotificationChannel):
    """Writes alerts to the log. Always succeeds."""

    LEVELS = {
        AlertSeverity.CRITICAL: logging.CRITICAL,
        AlertSeverity.HIGH: logging.ERROR,
        AlertSeverity.MEDIUM: logging.WARNING,
        AlertSeverity.LOW: logging.INFO,
    }

    async def send(self, alert: AlertEvent, destination: str) -> DeliveryResult:
        logger.log(
            self.LEVELS.get(alert.severity, logging.WARNING),
            "ALERT %s -> %s: %s",
            _subject(alert),
            destination,
            alert.message,
        )
        return DeliveryResult(success=True)


__all__ = [
    "DeliveryResult",
    "EmailChannel",
    "LogChannel",
    "NotificationChannel",
    "SlackChannel",
    "WebhookChannel",
]
