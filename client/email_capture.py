"""
Email Capture Form controller

Drives one capture form placement (hero, timeline, cta): local validation,
a single POST to the submit endpoint, and the idle/submitting/success/error
states shown to the visitor.
"""
import asyncio
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from core.config import logger, SUBMIT_EMAIL_URL, SIGNUP_RESET_DELAY_SEC
from core.errors import ClientSubmissionError
from utils.analytics import AnalyticsClient
from utils.validation import SIGNUP_SOURCES, validate_email_address
from client.context import BrowsingContext

SUCCESS_MESSAGE = "Thanks! We'll be in touch soon."
ERROR_MESSAGE = "Something went wrong. Please try again."
SUBMITTED_EVENT = "email_submitted"


class FormStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class EmailCaptureForm:
    def __init__(
        self,
        source: str,
        endpoint_url: str = SUBMIT_EMAIL_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        analytics: Optional[AnalyticsClient] = None,
        context: Optional[BrowsingContext] = None,
        reset_delay: float = SIGNUP_RESET_DELAY_SEC,
        correlate_signup: bool = True,
        timeout: float = 10.0,
    ):
        if source not in SIGNUP_SOURCES:
            raise ValueError(f"Unknown source tag: {source!r}")
        self.source = source
        self.endpoint_url = endpoint_url
        self.analytics = analytics
        self.context = context if context is not None else BrowsingContext.from_environment()
        self.reset_delay = reset_delay
        # Sends the stored record id with the analytics event; see DESIGN.md
        self.correlate_signup = correlate_signup
        self.timeout = timeout
        self._http_client = http_client

        self.status = FormStatus.IDLE
        self.email = ""
        self.field_error: Optional[str] = None
        self.message: Optional[str] = None
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    @property
    def is_busy(self) -> bool:
        return self.status == FormStatus.SUBMITTING

    def set_email(self, value: str) -> None:
        self.email = value or ""
        self.field_error = None

    def build_payload(self) -> Dict[str, Any]:
        return {
            "email": self.email.strip(),
            "source": self.source,
            "metadata": self.context.as_metadata(),
        }

    async def submit(self) -> bool:
        """
        Submit the bound email once. Returns True on a stored signup.
        Ignored while a previous submission is still in flight.
        """
        if self.is_busy:
            return False

        ok, error = validate_email_address(self.email)
        if not ok:
            self.field_error = error
            return False

        self.field_error = None
        self._cancel_reset()
        self.status = FormStatus.SUBMITTING
        self.message = None

        try:
            result = await self._post(self.build_payload())
        except ClientSubmissionError as ex:
            logger.error(f"[capture-form] submission error ({self.source}): {ex}")
            self._finish(FormStatus.ERROR, ERROR_MESSAGE)
            return False

        data = result.get("data") or {}
        logger.info(f"[capture-form] email submitted ({self.source}) id={data.get('id')}")

        self.email = ""
        self._finish(FormStatus.SUCCESS, SUCCESS_MESSAGE)
        await self._track_submitted(data.get("id"))
        return True

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.endpoint_url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.endpoint_url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as ex:
            raise ClientSubmissionError(f"request failed: {ex}") from ex

        try:
            result = response.json()
        except ValueError:
            result = {}
        if not isinstance(result, dict):
            result = {}

        if not response.is_success or not result.get("success"):
            raise ClientSubmissionError(result.get("error") or "Submission failed", status_code=response.status_code)
        return result

    async def _track_submitted(self, signup_id: Optional[str]) -> None:
        if self.analytics is None:
            return
        properties = {"source": self.source}
        if self.correlate_signup and signup_id:
            properties["email_hash"] = signup_id
        await self.analytics.capture(SUBMITTED_EVENT, properties)

    def _finish(self, status: FormStatus, message: str) -> None:
        self.status = status
        self.message = message
        self._schedule_reset()

    def _schedule_reset(self) -> None:
        self._cancel_reset()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._reset_handle = loop.call_later(self.reset_delay, self.reset)

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def reset(self) -> None:
        """Back to idle. Does not touch an in-flight submission."""
        self._reset_handle = None
        if self.status in (FormStatus.SUCCESS, FormStatus.ERROR):
            self.status = FormStatus.IDLE
            self.message = None
