"""
TwentyCRM integration for interest list submissions.

A submission becomes a Person record, and when the submitter left a message, a
Note attached to that person. Both calls report their outcome as a CrmResult
instead of raising, so a CRM outage never turns into an error page for the
submitter. Only a missing API key is raised, since no call can succeed without it.
"""

import httpx
import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from app.core.config import CrmConfig
from app.core.errors import CrmConfigurationError, CrmRequestError
from app.models.submission import CrmResult, Submission

logger = logging.getLogger(__name__)

DEFAULT_CALLING_CODE = "+1"
DEFAULT_COUNTRY_CODE = "US"
NO_MESSAGE_PLACEHOLDER = "No additional information provided"


def parse_phone(phone: Optional[str]) -> Dict[str, Any]:
    """
    Build the TwentyCRM phones block from a free-form phone number.

    Only numbers with at least 10 digits are kept and they are assumed to be US
    numbers. Anything shorter leaves the phone fields empty.
    """
    phone_data = {
        "primaryPhoneNumber": "",
        "primaryPhoneCallingCode": "",
        "primaryPhoneCountryCode": "",
        "additionalPhones": [],
    }

    if phone:
        digits = re.sub(r"\D", "", phone)
        if len(digits) >= 10:
            phone_data["primaryPhoneNumber"] = digits
            phone_data["primaryPhoneCallingCode"] = DEFAULT_CALLING_CODE
            phone_data["primaryPhoneCountryCode"] = DEFAULT_COUNTRY_CODE

    return phone_data


def _empty_link() -> Dict[str, Any]:
    return {
        "primaryLinkLabel": "",
        "primaryLinkUrl": "",
        "additionalLinks": [],
    }


def build_person_payload(submission: Submission) -> Dict[str, Any]:
    return {
        "phones": parse_phone(submission.phone),
        "xLink": _empty_link(),
        "linkedinLink": _empty_link(),
        "emails": {
            "primaryEmail": submission.email,
            "additionalEmails": None,
        },
        "name": {
            "firstName": submission.firstName,
            "lastName": submission.lastName,
        },
    }


def format_submission_date(day: date) -> str:
    """US short date without zero padding, e.g. 3/7/2026"""
    return f"{day.month}/{day.day}/{day.year}"


def build_note_body(
    submission: Submission,
    message: Optional[str],
    source: str,
    submitted_on: Optional[date] = None,
) -> str:
    """Summarize the whole submission as the text of a CRM note."""
    submitted_on = submitted_on or date.today()
    phone_line = f"- Phone: {submission.phone}" if submission.phone else ""
    reason_line = f"- Primary Interest: {submission.reason}" if submission.reason else ""
    newsletter_line = (
        "- Subscribed to newsletter updates"
        if submission.newsletter
        else "- Did not subscribe to newsletter"
    )

    lines = [
        f"Interest List Submission - {format_submission_date(submitted_on)}",
        "",
        "Contact Information:",
        f"- Name: {submission.full_name}",
        f"- Email: {submission.email}",
        phone_line,
        "",
        "Interest Details:",
        reason_line,
        newsletter_line,
        "",
        "Additional Information:",
        message or NO_MESSAGE_PLACEHOLDER,
        "",
        f"Source: {source}",
    ]
    return "\n".join(lines)


def extract_record_id(result: Any) -> Optional[str]:
    """
    Pull the created record id out of a TwentyCRM response.

    Accepts a flat record ({"id": ...}) as well as the REST envelope
    ({"data": {"createPerson": {"id": ...}}}).
    """
    if not isinstance(result, dict):
        return None

    if result.get("id"):
        return str(result["id"])

    data = result.get("data")
    if isinstance(data, dict):
        if data.get("id"):
            return str(data["id"])
        for record in data.values():
            if isinstance(record, dict) and record.get("id"):
                return str(record["id"])

    return None


class TwentyCrmClient:
    """Thin async client for the two TwentyCRM endpoints used by the interest list form."""

    def __init__(self, config: CrmConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    def _require_api_key(self) -> str:
        if not self.config.api_key:
            logger.error("❌ TwentyCRM API key not configured")
            raise CrmConfigurationError("TwentyCRM API key not configured")
        return self.config.api_key

    async def _post(self, path: str, payload: Dict[str, Any], api_key: str, label: str) -> Any:
        url = f"{self.config.base_url}/{path}"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

        logger.info(f"Making request to: {url}")
        async with httpx.AsyncClient(transport=self.transport, timeout=self.config.timeout) as client:
            response = await client.post(url, json=payload, headers=headers)

        logger.info(f"{label} response status: {response.status_code}")

        if not response.is_success:
            logger.error(f"{label} error - status {response.status_code}: {response.text}")
            raise CrmRequestError(
                f"{label} error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        return response.json()

    async def create_person(self, submission: Submission) -> CrmResult:
        """Create a Person for the submitter. Failures come back as CrmResult(success=False)."""
        logger.info(f"Creating person in TwentyCRM at {self.config.base_url} (API key configured: {bool(self.config.api_key)})")
        api_key = self._require_api_key()
        payload = build_person_payload(submission)

        try:
            result = await self._post("people", payload, api_key, "TwentyCRM API")
        except (CrmRequestError, httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ Error creating person in TwentyCRM ({type(e).__name__}, status {getattr(e, 'status_code', None)}): {str(e)}")
            return CrmResult(success=False, error=str(e) or type(e).__name__)

        person_id = extract_record_id(result)
        logger.info(f"✅ Created person with ID: {person_id}")
        return CrmResult(success=True, id=person_id)

    async def create_note(
        self,
        person_id: str,
        message: Optional[str],
        submission: Submission,
        submitted_on: Optional[date] = None,
    ) -> CrmResult:
        """Attach a note summarizing the submission to an existing Person."""
        api_key = self._require_api_key()
        payload = {
            "body": build_note_body(submission, message, self.config.note_source, submitted_on),
            "personId": person_id,
        }

        try:
            result = await self._post("notes", payload, api_key, "TwentyCRM Notes API")
        except (CrmRequestError, httpx.HTTPError, ValueError) as e:
            logger.error(f"❌ Error creating note in TwentyCRM ({type(e).__name__}, status {getattr(e, 'status_code', None)}): {str(e)}")
            return CrmResult(success=False, error=str(e) or type(e).__name__)

        note_id = extract_record_id(result)
        logger.info(f"✅ Created note with ID: {note_id} for person {person_id}")
        return CrmResult(success=True, id=note_id)
