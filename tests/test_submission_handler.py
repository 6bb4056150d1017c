import json
from urllib.parse import urlencode

import httpx
import pytest

from app.core.config import CrmConfig
from app.core.submission_handler import (
    THANK_YOU_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    SubmissionHandler,
)
from app.core.twenty_crm import TwentyCrmClient

from conftest import TEST_API_URL

JSON_HEADERS = {"Content-Type": "application/json"}


async def post_json(handler, fields):
    return await handler.handle("POST", JSON_HEADERS, json.dumps(fields))


@pytest.mark.asyncio
async def test_options_preflight_short_circuits(submission_handler, fake_twenty):
    response = await submission_handler.handle("OPTIONS", {}, b"garbage")

    assert response.status_code == 200
    assert response.body is None
    assert response.body_text() == ""
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert response.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
    assert fake_twenty.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH", "get"])
async def test_other_methods_are_rejected(submission_handler, fake_twenty, method):
    response = await submission_handler.handle(method, {}, b"")

    assert response.status_code == 405
    assert response.body == {"success": False, "error": "Method not allowed"}
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert fake_twenty.requests == []


@pytest.mark.asyncio
async def test_valid_submission_creates_person_and_note(submission_handler, fake_twenty, ada):
    response = await post_json(submission_handler, ada)

    assert response.status_code == 200
    assert response.body == {
        "success": True,
        "message": THANK_YOU_MESSAGE,
        "personId": "person-123",
        "noteId": "note-456",
    }
    assert response.headers["Access-Control-Allow-Origin"] == "*"

    person = fake_twenty.payloads("people")[0]
    assert {k: person["phones"][k] for k in ("primaryPhoneNumber", "primaryPhoneCallingCode", "primaryPhoneCountryCode")} == {
        "primaryPhoneNumber": "5551234567",
        "primaryPhoneCallingCode": "+1",
        "primaryPhoneCountryCode": "US",
    }
    note = fake_twenty.payloads("notes")[0]
    assert note["personId"] == "person-123"
    assert "Ada Lovelace" in note["body"]
    assert "Interested" in note["body"]
    assert note["body"].startswith("Interest List Submission - 3/7/2026")


@pytest.mark.asyncio
async def test_no_message_means_no_note(submission_handler, fake_twenty, ada):
    del ada["message"]

    response = await post_json(submission_handler, ada)

    assert response.status_code == 200
    assert response.body["personId"] == "person-123"
    assert "noteId" not in response.body
    assert fake_twenty.payloads("notes") == []


@pytest.mark.asyncio
async def test_person_failure_still_reports_success(submission_handler, fake_twenty, ada):
    fake_twenty.responses["people"] = (500, "internal error")

    response = await post_json(submission_handler, ada)

    assert response.status_code == 200
    assert response.body["success"] is True
    assert "personId" not in response.body
    assert "noteId" not in response.body
    assert fake_twenty.payloads("notes") == []


@pytest.mark.asyncio
async def test_note_failure_still_reports_success(submission_handler, fake_twenty, ada):
    fake_twenty.responses["notes"] = (400, "bad note")

    response = await post_json(submission_handler, ada)

    assert response.status_code == 200
    assert response.body["personId"] == "person-123"
    assert "noteId" not in response.body


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["firstName", "lastName", "email", "privacy"])
async def test_missing_required_field_is_rejected_before_crm(submission_handler, fake_twenty, ada, field):
    del ada[field]

    response = await post_json(submission_handler, ada)

    assert response.status_code == 400
    assert response.body == {"success": False, "error": "Missing required fields"}
    assert fake_twenty.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("email", ["a@b", "a.com", "@b.com"])
async def test_invalid_email_is_rejected(submission_handler, fake_twenty, ada, email):
    ada["email"] = email

    response = await post_json(submission_handler, ada)

    assert response.status_code == 400
    assert response.body == {"success": False, "error": "Invalid email format"}
    assert fake_twenty.requests == []


@pytest.mark.asyncio
async def test_urlencoded_submission(submission_handler, fake_twenty, ada):
    response = await submission_handler.handle(
        "POST",
        {"content-type": "application/x-www-form-urlencoded"},
        urlencode(ada).encode(),
    )

    assert response.status_code == 200
    assert fake_twenty.payloads("people")[0]["emails"]["primaryEmail"] == "ada@example.com"


@pytest.mark.asyncio
async def test_malformed_json_is_a_generic_500(submission_handler, fake_twenty):
    response = await submission_handler.handle("POST", JSON_HEADERS, b"{not json")

    assert response.status_code == 500
    assert response.body == {"success": False, "error": UNEXPECTED_ERROR_MESSAGE}
    assert fake_twenty.requests == []


@pytest.mark.asyncio
async def test_multipart_without_boundary_is_a_generic_500(submission_handler):
    response = await submission_handler.handle("POST", {"Content-Type": "multipart/form-data"}, b"firstName=Ada")

    assert response.status_code == 500
    assert response.body["error"] == UNEXPECTED_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_missing_api_key_is_a_generic_500(fake_twenty, ada):
    config = CrmConfig(api_url=TEST_API_URL)
    handler = SubmissionHandler(
        config,
        crm_client=TwentyCrmClient(config, transport=httpx.MockTransport(fake_twenty)),
    )

    response = await post_json(handler, ada)

    assert response.status_code == 500
    assert response.body == {"success": False, "error": UNEXPECTED_ERROR_MESSAGE}
    assert fake_twenty.requests == []


@pytest.mark.asyncio
async def test_validation_runs_before_api_key_check(ada):
    handler = SubmissionHandler(CrmConfig(api_url=TEST_API_URL))
    ada["email"] = "a.com"

    response = await post_json(handler, ada)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_zero_first_name_is_a_missing_field(submission_handler, fake_twenty, ada):
    ada["firstName"] = 0

    response = await post_json(submission_handler, ada)

    assert response.status_code == 400
    assert response.body == {"success": False, "error": "Missing required fields"}
    assert fake_twenty.requests == []
