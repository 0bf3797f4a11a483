"""Chat webhook notifier for build summaries."""

from __future__ import annotations

import dataclasses
import http
import os

import httpx

from buildwatch.logging import get_logger, log_info

from .errors import ChatConfigError, DeliveryError

logger = get_logger(__name__)

_DEFAULT_TIMEOUT_S = 10.0


@dataclasses.dataclass(frozen=True, slots=True)
class ChatWebhookConfig:
    """Configuration for the chat webhook notifier."""

    url: str
    timeout_s: float = _DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls) -> ChatWebhookConfig:
        """Build configuration from ``HANGOUT_URL``.

        Raises
        ------
        ChatConfigError
            If ``HANGOUT_URL`` is unset or blank.

        """
        url = os.environ.get("HANGOUT_URL", "").strip()
        if not url:
            raise ChatConfigError.missing_url()
        return cls(url=url)


class ChatWebhookNotifier:
    """Post plain-text messages to an incoming chat webhook.

    Parameters
    ----------
    config
        Webhook URL and timeout.
    http_client
        Optional client for testing; when omitted the notifier owns one.

    """

    def __init__(
        self,
        config: ChatWebhookConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the notifier with its webhook configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def send(self, text: str) -> None:
        """Deliver ``text`` as ``{"text": text}``.

        Raises
        ------
        DeliveryError
            If the request fails or the webhook answers with anything but 200.

        """
        try:
            response = await self._client.post(
                self._config.url,
                json={"text": text},
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise DeliveryError.transport(str(exc) or type(exc).__name__) from exc

        if response.status_code != http.HTTPStatus.OK:
            raise DeliveryError.rejected(response.status_code)

        log_info(logger, "A message has been sent to the CI chat room: %s", text)
