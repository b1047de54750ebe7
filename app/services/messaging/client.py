"""
WhatsApp messaging client for sending replies to users.

This module provides a client for the WhatsApp Business (Cloud) API. The
feedback flow only ever replies with plain text, so that is the one
operation a messaging client has to offer.
"""

from __future__ import annotations
import httpx
from typing import Dict, Any, Optional
from app.logging import setup_logger


class WhatsAppAPIError(Exception):
    """Raised when the Graph API rejects or fails a send request."""

    def __init__(self, message: str, code: Optional[Any] = None, status_code: int = 0):
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class MessagingClient:
    """
    Base class for messaging clients defining the interface for sending messages.

    Any platform client (or a test double) only needs to implement send_message.
    """

    def __init__(self):
        self.logger = setup_logger(__name__)

    async def send_message(
        self, message: str, phone_number: str, **kwargs
    ) -> Dict[str, Any]:
        """
        Send a text message to a recipient.

        Args:
            message: Text content to send
            phone_number: Identifier for the message recipient
            kwargs: Additional platform-specific parameters

        Returns:
            Response data from the messaging platform
        """
        raise NotImplementedError("Subclasses must implement this method")


class WhatsApp(MessagingClient):
    """WhatsApp messaging client implementation using the WhatsApp Business API."""

    def __init__(
        self,
        token: Optional[str] = None,
        phone_number_id: Optional[str] = None,
        api_version: str = "v17.0",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__()
        self.token = token
        self.phone_number_id = phone_number_id
        self.base_url = f"https://graph.facebook.com/{api_version}"
        self.url = f"{self.base_url}/{phone_number_id}/messages"
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
        }

    async def send_message(
        self,
        message: str,
        phone_number: str,
        recipient_type: str = "individual",
        preview_url: bool = False,
    ) -> Dict[str, Any]:
        """Send a text message to a WhatsApp user."""

        data = {
            "messaging_product": "whatsapp",
            "recipient_type": recipient_type,
            "to": phone_number,
            "type": "text",
            "text": {"preview_url": preview_url, "body": message},
        }

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            response = await client.post(self.url, headers=self.headers, json=data)

        try:
            response_data = response.json()
        except ValueError:
            response_data = {"error": {"message": response.text}}

        if response.status_code != 200:
            self._handle_api_error(response_data, phone_number, response.status_code)

        self.logger.info(f"Sent message to {phone_number}")
        return response_data

    def _handle_api_error(
        self,
        response_data: Dict[str, Any],
        phone_number: str,
        status_code: int,
    ) -> None:
        """Log a WhatsApp API error and raise it as WhatsAppAPIError."""

        error_info = response_data.get("error", {})
        error_code = error_info.get("code")
        error_message = error_info.get("message", "Unknown error")

        if error_code == 131030:
            # Common in test environments when the recipient isn't in the allowed list
            error_message = (
                "Recipient phone number not in allowed list. "
                "Add the number to test numbers in Meta developer portal."
            )
            self.logger.error(f"WhatsApp API Error {error_code}: {error_message}")
        else:
            self.logger.error(
                f"Failed to send message to {phone_number}: {error_message} (Code: {error_code})"
            )

        raise WhatsAppAPIError(error_message, code=error_code, status_code=status_code)
