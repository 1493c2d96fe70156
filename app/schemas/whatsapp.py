"""Pydantic schemas for outbound WhatsApp Cloud API payloads.

Only plain text messages are sent (alert notifications).

Reference: https://developers.facebook.com/docs/whatsapp/cloud-api/reference/messages
"""

from typing import Any

from pydantic import BaseModel

# Cloud API rejects text bodies longer than this
MAX_TEXT_BODY_LENGTH = 4096


class OutboundTextMessage(BaseModel):
    """Schema for sending a text message."""

    messaging_product: str = "whatsapp"
    recipient_type: str = "individual"
    to: str  # Recipient phone number, digits only with country code
    type: str = "text"
    text: dict[str, Any]  # {"body": "message content"}

    @classmethod
    def create(cls, to: str, body: str, preview_url: bool = False) -> "OutboundTextMessage":
        """Create a text message payload.

        Args:
            to: Recipient phone number in E.164 form ("+" is stripped)
            body: Message text content, truncated to the API limit
            preview_url: Whether to show URL preview

        Returns:
            OutboundTextMessage instance ready for API call.
        """
        text_content: dict[str, Any] = {"body": body[:MAX_TEXT_BODY_LENGTH]}
        if preview_url:
            text_content["preview_url"] = True
        return cls(to=to.lstrip("+"), text=text_content)
