"""Chat webhook delivery."""

from __future__ import annotations

from .client import ChatWebhookConfig, ChatWebhookNotifier
from .errors import ChatConfigError, DeliveryError

__all__ = [
    "ChatConfigError",
    "ChatWebhookConfig",
    "ChatWebhookNotifier",
    "DeliveryError",
]
