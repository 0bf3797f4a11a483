"""buildwatch: chat notifications for CI build events.

Build-completion events arrive on a message bus, are enriched with commit
metadata from GitHub and are announced on a chat webhook.
"""

from __future__ import annotations

__version__ = "0.1.0"
