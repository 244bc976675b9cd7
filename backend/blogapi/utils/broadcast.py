"""Broadcast events through Pusher Channels"""
from typing import Any, Dict, Optional

import pusher
import requests
from pusher.errors import PusherError

from blogapi.config import Settings
from blogapi.errors import UpstreamError
from blogapi.utils.logger import logger

BLOGS_CHANNEL = "blogs-channel"
NEW_BLOG_EVENT = "new-blog"


class PusherPublisher:
    """Publishes events to a Pusher channel.

    Calls are synchronous with a bounded ``timeout``. Any failure (network,
    a non-2xx reply or an event the SDK refuses to send, such as one over the
    10 KB payload limit) is raised as :class:`UpstreamError` for the caller to log.
    """

    def __init__(
        self,
        app_id: Optional[str],
        key: Optional[str],
        secret: Optional[str],
        cluster: str = "mt1",
        host: Optional[str] = None,
        port: Optional[int] = None,
        use_tls: bool = True,
        timeout: int = 5,
    ):
        self.client: Optional[pusher.Pusher] = None
        if app_id and key and secret:
            self.client = pusher.Pusher(
                app_id=app_id,
                key=key,
                secret=secret,
                cluster=cluster,
                host=host,
                port=port,
                ssl=use_tls,
                timeout=timeout,
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PusherPublisher":
        return cls(
            app_id=settings.PUSHER_APP_ID,
            key=settings.PUSHER_KEY,
            secret=settings.PUSHER_SECRET,
            cluster=settings.PUSHER_CLUSTER,
            host=settings.PUSHER_HOST,
            port=settings.PUSHER_PORT,
            use_tls=settings.PUSHER_USE_TLS,
            timeout=settings.PUSHER_TIMEOUT,
        )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def publish(self, channel: str, event: str, data: Dict[str, Any]) -> None:
        """Trigger ``event`` on ``channel`` with a JSON payload."""
        if self.client is None:
            raise UpstreamError("Push service is not configured")

        try:
            self.client.trigger(channel, event, data)
        except (PusherError, requests.RequestException) as exc:
            raise UpstreamError(f"Push delivery failed: {exc}") from exc
        except ValueError as exc:
            # Raised before sending, e.g. for events over the size limit
            raise UpstreamError(f"Push event rejected: {exc}") from exc

        logger.debug("Push event delivered", extra={"action": "publish", "event": event})
