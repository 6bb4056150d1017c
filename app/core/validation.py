import re

from app.core.errors import SubmissionValidationError
from app.models.submission import REQUIRED_FIELDS, Submission

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MISSING_FIELDS_ERROR = "Missing required fields"
INVALID_EMAIL_ERROR = "Invalid email format"


def is_valid_email(email: str) -> bool:
    """Syntactic check only, no DNS or mailbox lookup"""
    return bool(EMAIL_RE.fullmatch(email or ""))


def validate_submission(submission: Submission) -> None:
    """Raise SubmissionValidationError for missing required fields first, then for a malformed email."""
    if not all(getattr(submission, name) for name in REQUIRED_FIELDS):
        raise SubmissionValidationError(MISSING_FIELDS_ERROR)

    if not is_valid_email(submission.email):
        raise SubmissionValidationError(INVALID_EMAIL_ERROR)
