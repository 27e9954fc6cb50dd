"""
Assistant Client - Sends user turns to the remote assistant service.
"""

import logging
import httpx
from typing import Optional

logger = logging.getLogger(__name__)


class AssistantError(Exception):
    """The assistant service could not be reached or returned an unusable reply."""


class AssistantClient:
    """
    Thin request/response client for the assistant service.
    Failures raise AssistantError; nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        api_key: Optional[str] = None,
    ):
        """
        Initialize the assistant client.

        Args:
            base_url: Service root, e.g. "http://127.0.0.1:8787"
            timeout: Request timeout in seconds
            api_key: Optional bearer token
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.api_key = api_key

    async def send_message(self, session_id: str, message: str) -> str:
        """
        Send one user turn and return the assistant's reply.

        Args:
            session_id: Conversation the turn belongs to
            message: User text

        Returns:
            str: Reply text

        Raises:
            AssistantError: On transport errors, non-2xx status or a malformed body
        """
        url = f"{self.base_url}/api/chat"
        payload = {
            "message": message,
            "session_id": session_id,
        }
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        logger.info(f"Sending message for {session_id}: {message[:80]!r}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=payload, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Assistant returned {e.response.status_code} for {session_id}: "
                         f"{e.response.text[:200]}")
            raise AssistantError(f"HTTP error {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error sending message to assistant for {session_id}: {e}")
            raise AssistantError(str(e)) from e

        reply = data.get("reply") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise AssistantError("Assistant response has no 'reply' text")

        return reply
