import math
import time
from collections.abc import Callable

import httpx
import structlog

from sillon.constants import (
    HEALTH_DEFAULT_TIMEOUT_SECONDS,
    HEALTH_POLL_INTERVAL_SECONDS,
    HEALTH_REQUEST_TIMEOUT_SECONDS,
    READINESS_PATH,
)
from sillon.exceptions import HealthTimeoutError

LOG = structlog.get_logger()


class HealthPoller:
    """Blocks until CouchDB answers its readiness endpoint with a 200."""

    def __init__(
        self,
        *,
        host: str = "localhost",
        interval: float = HEALTH_POLL_INTERVAL_SECONDS,
        request_timeout: float = HEALTH_REQUEST_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.host = host
        self.interval = interval
        self.request_timeout = request_timeout
        self.transport = transport
        self.sleep = sleep

    def readiness_url(self, port: int) -> str:
        return f"http://{self.host}:{port}{READINESS_PATH}"

    def is_ready(self, client: httpx.Client, url: str) -> bool:
        try:
            return client.get(url).status_code == 200
        except httpx.TransportError:
            # connection refused, reset or timed out: not up yet
            return False

    def wait_until_ready(self, port: int, timeout_seconds: float = HEALTH_DEFAULT_TIMEOUT_SECONDS) -> None:
        url = self.readiness_url(port)
        max_attempts = max(1, math.ceil(timeout_seconds / self.interval))

        with httpx.Client(timeout=self.request_timeout, transport=self.transport) as client:
            for attempt in range(1, max_attempts + 1):
                if self.is_ready(client, url):
                    LOG.info("CouchDB is ready", url=url, attempts=attempt)
                    return
                LOG.debug("CouchDB not ready yet", url=url, attempt=attempt, max_attempts=max_attempts)
                self.sleep(self.interval)

        raise HealthTimeoutError(max_attempts * self.interval, url=url)
