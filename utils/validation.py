"""
Validation contract for email submissions
Shared by the capture form (client-side gate) and the submit endpoint (authority check)
"""
import re
from typing import Any, Dict, List, Literal, Optional, Tuple, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from core.errors import InputValidationError

SignupSource = Literal["hero", "timeline", "cta"]
SIGNUP_SOURCES = get_args(SignupSource)

EMAIL_MAX_LENGTH = 255
_EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Longer metadata strings are cut to these lengths, never rejected
METADATA_MAX_LENGTHS = {
    "referrer": 2048,
    "timezone": 64,
    "utm_source": 255,
    "utm_medium": 255,
    "utm_campaign": 255,
    "posthog_id": 255,
}


class EmailRuleError(ValueError):
    """Every email rule the value breaks, in rule order."""

    def __init__(self, messages: List[str]):
        super().__init__(messages[0])
        self.messages = messages


def normalize_email(email: str) -> str:
    # Surrounding whitespace only; the address keeps its case
    return (email or "").strip()


def email_address_errors(email: str) -> List[str]:
    """All failing rules for an email: required, local@domain.tld shape, bounded length."""
    trimmed = normalize_email(email)
    errors = []

    if not trimmed:
        errors.append("Email is required")

    if not _EMAIL_RE.match(trimmed):
        errors.append("Please enter a valid email address")

    if len(trimmed) > EMAIL_MAX_LENGTH:
        errors.append("Email is too long")

    return errors


def validate_email_address(email: str) -> Tuple[bool, str]:
    """
    Validate an email address.
    Returns (is_valid, error_message) with the first failing rule's message.
    """
    errors = email_address_errors(email)
    if errors:
        return False, errors[0]
    return True, ""


class SubmissionMetadata(BaseModel):
    """Optional context sent with a submission. Unknown keys are dropped."""

    model_config = ConfigDict(extra="ignore")

    referrer: Optional[str] = None
    screen_width: Optional[int] = Field(default=None, ge=0)
    screen_height: Optional[int] = Field(default=None, ge=0)
    timezone: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    posthog_id: Optional[str] = None

    @field_validator(*METADATA_MAX_LENGTHS, mode="before")
    @classmethod
    def _truncate(cls, value: Any, info: ValidationInfo) -> Any:
        limit = METADATA_MAX_LENGTHS[info.field_name]
        if isinstance(value, str) and len(value) > limit:
            return value[:limit]
        return value


METADATA_FIELDS = tuple(SubmissionMetadata.model_fields)


class EmailSubmission(BaseModel):
    # Extra body keys (e.g. user_agent) never reach the record
    model_config = ConfigDict(extra="ignore")

    email: str
    source: SignupSource
    metadata: Optional[SubmissionMetadata] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        errors = email_address_errors(value)
        if errors:
            raise EmailRuleError(errors)
        return normalize_email(value)

    def metadata_dict(self) -> Dict[str, Any]:
        if self.metadata is None:
            return {}
        return self.metadata.model_dump(exclude_none=True)


def _error_details(ex: ValidationError) -> List[Dict[str, Any]]:
    details = []
    for err in ex.errors(include_url=False):
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        code = err.get("type", "invalid")
        ctx_error = (err.get("ctx") or {}).get("error")
        if isinstance(ctx_error, EmailRuleError):
            messages = ctx_error.messages
        elif code == "value_error" and ctx_error:
            messages = [str(ctx_error)]
        else:
            messages = [err.get("msg", "")]
        for message in messages:
            details.append({"field": field, "message": message, "code": code})
    return details


def parse_submission(body: Any) -> EmailSubmission:
    """Validate a decoded request body. Raises InputValidationError with per-field details."""
    try:
        return EmailSubmission.model_validate(body)
    except ValidationError as ex:
        raise InputValidationError(_error_details(ex))
