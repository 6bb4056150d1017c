"""
Interest list submission handler.

One handler serves every entry point (the FastAPI route and the serverless
function). It takes the raw method, headers and body and returns a
HandlerResponse, so the entry points only translate to and from their own
request/response types.

Flow:
1. OPTIONS preflight short-circuits, anything but POST is rejected with 405
2. Body is decoded according to its Content-Type
3. Required fields and email format are validated (400 on failure)
4. Person is created in TwentyCRM
5. A note is attached when the person exists and a message was given
6. 200 is returned even when the CRM calls failed; the failures are only logged
"""

import json
import logging
from datetime import date
from typing import Callable, Dict, Mapping, Optional, Union

from pydantic import BaseModel

from app.core.config import CrmConfig
from app.core.decoders import decode_submission
from app.core.errors import InterestListError, SubmissionValidationError
from app.core.twenty_crm import TwentyCrmClient
from app.core.validation import validate_submission
from app.models.submission import CrmResult, ErrorResponse, Submission, SubmissionResponse

logger = logging.getLogger(__name__)

THANK_YOU_MESSAGE = "Thank you for joining our interest list! We'll be in touch soon."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


class HandlerResponse(BaseModel):
    status_code: int
    headers: Dict[str, str]
    body: Optional[dict] = None

    def body_text(self) -> str:
        return json.dumps(self.body) if self.body is not None else ""


def _json_response(status_code: int, body: BaseModel, cors_headers: Optional[Dict[str, str]] = None) -> HandlerResponse:
    headers = {"Content-Type": "application/json"}
    headers.update(cors_headers or {"Access-Control-Allow-Origin": "*"})
    return HandlerResponse(
        status_code=status_code,
        headers=headers,
        body=body.model_dump(exclude_none=True),
    )


class SubmissionHandler:
    def __init__(
        self,
        config: CrmConfig,
        crm_client: Optional[TwentyCrmClient] = None,
        today: Callable[[], date] = date.today,
    ):
        self.config = config
        self.crm_client = crm_client or TwentyCrmClient(config)
        self.today = today

    async def handle(
        self,
        method: str,
        headers: Mapping[str, str],
        body: Union[bytes, str, None],
    ) -> HandlerResponse:
        method = (method or "").upper()
        logger.info(f"Interest list request received: {method}")

        if method == "OPTIONS":
            return HandlerResponse(
                status_code=200,
                headers={"Content-Type": "text/plain", **CORS_HEADERS},
                body=None,
            )

        if method != "POST":
            logger.warning(f"Rejected {method} request to interest list endpoint")
            return _json_response(405, ErrorResponse(error=METHOD_NOT_ALLOWED_MESSAGE), CORS_HEADERS)

        if isinstance(body, str):
            body = body.encode("utf-8")
        body = body or b""

        content_type = ""
        for key, value in headers.items():
            if key.lower() == "content-type":
                content_type = value
                break

        try:
            submission = await decode_submission(content_type, body)
            validate_submission(submission)
            result = await self.process(submission)
        except SubmissionValidationError as e:
            logger.info(f"Submission rejected: {e.message}")
            return _json_response(400, ErrorResponse(error=e.message))
        except InterestListError as e:
            logger.error(f"❌ Error processing form submission [{e.kind}]: {str(e)}")
            return _json_response(500, ErrorResponse(error=UNEXPECTED_ERROR_MESSAGE))
        except Exception as e:
            logger.exception(f"❌ Unexpected error processing form submission: {str(e)}")
            return _json_response(500, ErrorResponse(error=UNEXPECTED_ERROR_MESSAGE))

        return _json_response(200, result)

    async def process(self, submission: Submission) -> SubmissionResponse:
        """Push a validated submission to TwentyCRM. CRM failures are logged, never raised."""
        person_result = await self.crm_client.create_person(submission)

        if not person_result.success:
            # The submitter still gets a thank-you; the lead only exists in the logs
            logger.error(f"❌ FAILED to create person in TwentyCRM: {person_result.error}")
        else:
            logger.info(f"✅ Person created in TwentyCRM with ID: {person_result.id}")

        note_result: Optional[CrmResult] = None
        if person_result.success and person_result.id and submission.message:
            note_result = await self.crm_client.create_note(
                person_result.id,
                submission.message,
                submission,
                submitted_on=self.today(),
            )
            if not note_result.success:
                logger.error(f"❌ FAILED to create note in TwentyCRM: {note_result.error}")
        else:
            logger.info(
                f"⏭️ Skipping note creation - person success: {person_result.success}, "
                f"person ID: {person_result.id}, message exists: {bool(submission.message)}"
            )

        note_id = note_result.id if note_result and note_result.success else None
        logger.info(
            f"Form submission received: name={submission.full_name}, email={submission.email}, "
            f"reason={submission.reason}, personId={person_result.id}, noteId={note_id}"
        )

        return SubmissionResponse(
            message=THANK_YOU_MESSAGE,
            personId=person_result.id if person_result.success else None,
            noteId=note_id,
        )
