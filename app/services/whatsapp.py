"""WhatsApp notification channel.

Sends plain text messages through the Meta Cloud API. Used for alert
notifications only; delivery is fire-and-report, nothing is retried beyond
transient transport errors.

Reference: https://developers.facebook.com/docs/whatsapp/cloud-api/messages
"""

import logging
from typing import Any

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from app.config import Settings
from app.schemas.whatsapp import OutboundTextMessage
from app.utils.phone import normalize_phone

logger = logging.getLogger(__name__)

# Constants
WHATSAPP_API_VERSION = "v18.0"
WHATSAPP_API_BASE_URL = f"https://graph.facebook.com/{WHATSAPP_API_VERSION}"


class WhatsAppServiceError(Exception):
    """Base exception for WhatsApp service errors."""
    pass


class MessageSendError(WhatsAppServiceError):
    """Raised when message sending fails."""
    pass


class WhatsAppNotifier:
    """Outbound WhatsApp text sender.

    The HTTP client is created lazily and reused until ``close()``.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize the notifier.

        Args:
            settings: Application settings (phone number id, token, timeout)
            http_client: Optional pre-built HTTP client, mainly for tests
        """
        self._settings = settings
        self._http_client = http_client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client for API calls."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                timeout=self._settings.whatsapp_timeout_seconds,
                headers={
                    "Authorization": f"Bearer {self._settings.whatsapp_access_token}",
                    "Content-Type": "application/json",
                },
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _post_message(self, payload: dict[str, Any]) -> httpx.Response:
        url = f"{WHATSAPP_API_BASE_URL}/{self._settings.whatsapp_phone_number_id}/messages"
        client = await self._get_http_client()
        return await client.post(url, json=payload)

    async def send_text_message(self, to: str, text: str) -> dict[str, Any]:
        """Send a text message.

        Args:
            to: Recipient phone number in any format accepted by ``normalize_phone``
            text: Message body

        Returns:
            Parsed API response

        Raises:
            MessageSendError: If the number is unusable, the channel is not
                configured, or the API call fails.
        """
        if not self._settings.whatsapp_configured:
            raise MessageSendError("WhatsApp channel is not configured")

        recipient = normalize_phone(to)
        if not recipient:
            raise MessageSendError(f"Invalid recipient phone number: {to!r}")

        payload = OutboundTextMessage.create(recipient, text)

        try:
            response = await self._post_message(payload.model_dump())
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"WhatsApp API error: status={e.response.status_code}, body={e.response.text}"
            )
            raise MessageSendError(f"Failed to send message: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"WhatsApp API request error: {e}")
            raise MessageSendError(f"Failed to connect to WhatsApp API: {e}") from e
