from pydantic import BaseModel
from typing import Optional

REQUIRED_FIELDS = ("firstName", "lastName", "email", "privacy")
OPTIONAL_FIELDS = ("phone", "reason", "message", "newsletter")


class Submission(BaseModel):
    """Normalized interest list form data. Required fields default to "" so emptiness is the only check."""
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: Optional[str] = None
    reason: Optional[str] = None
    message: Optional[str] = None
    newsletter: Optional[str] = None  # any value means opted in
    privacy: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.firstName} {self.lastName}"


class CrmResult(BaseModel):
    """Outcome of a single CRM call"""
    success: bool
    id: Optional[str] = None
    error: Optional[str] = None


class SubmissionResponse(BaseModel):
    success: bool = True
    message: str
    personId: Optional[str] = None
    noteId: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
