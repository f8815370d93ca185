"""
Input Validator

Turns an untrusted request body into a Submission, or a list of field-level
error messages. Callers only ever show the summary message; the individual
messages are kept for logging.
"""

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..common.schemas import Submission, MAX_FIELD_LENGTH

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INVALID_BODY_MESSAGE = "Invalid request body"
MISSING_FIELDS_MESSAGE = "Missing required fields."


@dataclass
class ValidationResult:
    """Either a Submission or the errors that prevented building one"""
    submission: Optional[Submission] = None
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.submission is not None and not self.errors


def sanitize(value: Any) -> str:
    """Trim and cap a free-text value. Falsy values become ''."""
    if not value:
        return ""
    return str(value).strip()[:MAX_FIELD_LENGTH]


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def _is_blank(value: Any) -> bool:
    return not value or not str(value).strip()


def validate_submission(raw: Any) -> ValidationResult:
    """
    Validate and sanitize a raw nomination body.

    Args:
        raw: Parsed JSON body (anything; only dicts can pass)

    Returns:
        ValidationResult with a Submission, or with errors
    """
    if not isinstance(raw, dict):
        return ValidationResult(errors=[INVALID_BODY_MESSAGE])

    errors: List[str] = []

    if _is_blank(raw.get("nominatorName")):
        errors.append("Name is required")
    if _is_blank(raw.get("nominatorEmail")):
        errors.append("Email is required")
    elif not is_valid_email(str(raw["nominatorEmail"]).strip()):
        errors.append("Please enter a valid email address")
    if _is_blank(raw.get("businessName")):
        errors.append("Business name is required")
    if _is_blank(raw.get("reason")):
        errors.append("Reason is required")

    if errors:
        return ValidationResult(errors=errors)

    submission = Submission(
        nominator_name=sanitize(raw.get("nominatorName")),
        nominator_email=sanitize(raw.get("nominatorEmail")).lower(),
        nominator_phone=sanitize(raw.get("nominatorPhone")),
        business_name=sanitize(raw.get("businessName")),
        business_website=sanitize(
            raw.get("businessWebsite") or raw.get("businessWebsiteOrInstagram")
        ),
        reason=sanitize(raw.get("reason")),
        notify_business=bool(raw.get("notifyBusiness")),
        business_contact=sanitize(raw.get("businessContact")),
    )
    return ValidationResult(submission=submission)
