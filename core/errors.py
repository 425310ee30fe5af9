"""
Error taxonomy for the email signup flow
Each error carries the HTTP status and the message that is safe to show the caller
"""
from typing import Any, Dict, List, Optional


class SignupError(Exception):
    status_code = 500
    public_message = "An error occurred while submitting your email"

    def to_response(self) -> Dict[str, Any]:
        return {"success": False, "error": self.public_message}


class InputValidationError(SignupError):
    """Malformed or missing fields; raised before any side effect."""

    status_code = 400
    public_message = "Invalid request data"

    def __init__(self, details: List[Dict[str, Any]]):
        super().__init__(self.public_message)
        self.details = details

    def to_response(self) -> Dict[str, Any]:
        return {"success": False, "error": self.public_message, "details": self.details}


class DuplicateEmailError(SignupError):
    status_code = 409
    public_message = "This email is already registered"

    def __init__(self, email: str):
        super().__init__(self.public_message)
        self.email = email


class UnclassifiedPersistenceError(SignupError):
    """Any storage failure other than a duplicate email. The cause stays server-side."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(f"persistence failure: {cause!r}")
        self.cause = cause


class ClientSubmissionError(Exception):
    """Transport or HTTP failure seen by the capture form."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
