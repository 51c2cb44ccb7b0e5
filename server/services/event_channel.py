"""
Event channel: fire-and-forget notifications (match created, swipe undone).

Delivery is best effort; publishing never blocks or fails a request.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Protocol

import requests

logger = logging.getLogger(__name__)


class EventChannel(Protocol):
    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        ...


class LoggingEventChannel:
    """Logs events only. Used when no webhook is configured."""

    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        logger.info("[events] %s %s", event_type, payload)


class HttpEventChannel:
    """POSTs {type, payload} JSON to a webhook on a small background pool."""

    def __init__(self, url: str, timeout: float = 3.0, max_workers: int = 2):
        self.url = url
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="events")

    def _send(self, event_type: str, payload: Dict[str, Any]) -> None:
        try:
            response = requests.post(
                self.url,
                json={"type": event_type, "payload": payload},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("[events] delivery failed type=%s url=%s: %s", event_type, self.url, e)

    def publish(self, event_type: str, payload: Dict[str, Any]) -> None:
        self._executor.submit(self._send, event_type, payload)

    def close(self) -> None:
        self._executor.shutdown(wait=False)
