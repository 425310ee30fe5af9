"""
Analytics event capture (PostHog HTTP capture API)
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from core.config import POSTHOG_KEY, POSTHOG_HOST, logger


class AnalyticsClient:
    """
    Minimal capture client. Events are dropped (with a warning at creation)
    when the key or host is not configured.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        host: Optional[str] = None,
        distinct_id: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.api_key = (POSTHOG_KEY if api_key is None else api_key).strip()
        self.host = (POSTHOG_HOST if host is None else host).strip().rstrip("/")
        # Anonymous id for this visitor; never derived from the email
        self.distinct_id = distinct_id or str(uuid.uuid4())
        self._http_client = http_client
        self.timeout = timeout

        logger.info(f"[analytics] key: {'present' if self.api_key else 'missing'}, host: {'present' if self.host else 'missing'}")
        if not self.enabled:
            logger.warning("[analytics] POSTHOG_KEY/POSTHOG_HOST not set; events will not be sent")

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.host)

    def build_event(self, event: str, properties: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            "api_key": self.api_key,
            "event": event,
            "distinct_id": self.distinct_id,
            "properties": dict(properties or {}),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def capture(self, event: str, properties: Optional[Dict[str, Any]] = None) -> bool:
        """
        Send one event. Returns True when the capture endpoint accepted it.
        Failures are logged and reported as False, never raised.
        """
        if not self.enabled:
            return False

        payload = self.build_event(event, properties)
        url = f"{self.host}/capture/"
        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, json=payload, timeout=self.timeout)

            if response.status_code != 200:
                logger.error(f"[analytics] capture '{event}' failed: {response.status_code}")
                return False
            return True
        except httpx.HTTPError as ex:
            logger.warning(f"[analytics] capture '{event}' error: {ex}")
            return False
