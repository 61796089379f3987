"""HTTP client for the Evolution API WhatsApp gateway."""

from typing import Any, Optional

import httpx

from talkhub.config import settings
from talkhub.logging_config import get_logger
from talkhub.services.result import Result

logger = get_logger("evolution_client")

MEDIA_MESSAGE_TYPES = {"image", "document"}


def build_gateway_payload(
    phone: str,
    content: str,
    message_type: str = "text",
    file_url: Optional[str] = None,
) -> dict[str, Any]:
    """Build the sendText body for the given message type.

    Text goes out as ``{number, text}``. Images and documents go out as
    ``{number, mediatype, media, caption?}`` with the caption only when
    the agent typed something.
    """
    payload: dict[str, Any] = {"number": phone}
    if message_type in MEDIA_MESSAGE_TYPES:
        payload["mediatype"] = message_type
        payload["media"] = file_url
        if content:
            payload["caption"] = content
    else:
        payload["text"] = content
    return payload


class EvolutionClient:
    def __init__(
        self,
        api_url: str,
        api_key: str,
        instance: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.instance = instance or settings.evolution_instance
        self.timeout = timeout if timeout is not None else settings.gateway_timeout_seconds

    @property
    def send_url(self) -> str:
        return f"{self.api_url}/message/sendText/{self.instance}"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "apikey": self.api_key}

    def send(self, payload: dict[str, Any]) -> Result[dict]:
        number = payload.get("number")
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.send_url, headers=self._headers(), json=payload)
        except httpx.HTTPError as e:
            logger.error(
                "Evolution API request failed",
                extra={"context": {"number": number, "error": str(e)}},
            )
            return Result.failure(str(e), "network_error")

        if not response.is_success:
            logger.error(
                "Evolution API rejected message",
                extra={
                    "context": {
                        "number": number,
                        "status": response.status_code,
                        "body": response.text[:500],
                    }
                },
            )
            return Result.failure(response.text[:500], status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text[:500]}
        logger.info(
            "Evolution API accepted message",
            extra={"context": {"number": number, "status": response.status_code}},
        )
        return Result.success(data, status_code=response.status_code)

    def send_text(self, phone: str, text: str) -> Result[dict]:
        return self.send(build_gateway_payload(phone, text))
