import queue
import logging
import requests
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from trading_agents.core.config import NotificationConfig
from trading_agents.core.types import AgentUpdate

logger = logging.getLogger(__name__)

# A sink is any callable taking an AgentUpdate. Return values are ignored.
NotificationSink = Callable[[AgentUpdate], None]


class LoggingNotificationSink:
    """Writes every update to the log. Default sink when none is configured."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def __call__(self, update: AgentUpdate) -> None:
        logger.log(
            self.level,
            "%s %s: %s",
            update.agent_type, update.status, update.message,
            extra={"agent_type": update.agent_type, "status": update.status,
                   "conversation_id": update.conversation_id},
        )


class QueueNotificationSink:
    """In-memory sink; a websocket bridge or a test drains it."""

    def __init__(self, maxsize: int = 0):
        self._queue: "queue.Queue[AgentUpdate]" = queue.Queue(maxsize=maxsize)

    def __call__(self, update: AgentUpdate) -> None:
        # put_nowait: a full queue drops the update instead of stalling the pipeline
        try:
            self._queue.put_nowait(update)
        except queue.Full:
            logger.warning("Notification queue full; dropping %s %s", update.agent_type, update.status)

    def drain(self) -> List[AgentUpdate]:
        updates: List[AgentUpdate] = []
        while True:
            try:
                updates.append(self._queue.get_nowait())
            except queue.Empty:
                return updates


class WebhookNotificationSink:
    """POSTs updates as JSON to a pub/sub webhook.

    Delivery runs on one background worker: the caller never waits on the
    network, and updates leave in the order they were published.
    """

    def __init__(
        self,
        config: Optional[NotificationConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or NotificationConfig()
        self.config.validate(required=True)
        self._session = session or requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="agent-updates")

    def __call__(self, update: AgentUpdate) -> None:
        self._executor.submit(self._deliver, update)

    def _payload(self, update: AgentUpdate) -> Dict:
        payload = update.to_dict()
        payload["topic"] = update.topic or self.config.topic
        return payload

    def _deliver(self, update: AgentUpdate) -> bool:
        try:
            response = self._session.post(
                self.config.webhook_url,
                json=self._payload(update),
                headers=self.config.headers or None,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            return True
        except requests.RequestException as e:
            logger.warning(
                "Agent update delivery failed: %s", e,
                extra={"agent_type": update.agent_type, "status": update.status},
            )
            return False

    def close(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
        self._session.close()

    def __enter__(self) -> "WebhookNotificationSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
