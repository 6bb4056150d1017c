"""
Shared fixtures: a fake TwentyCRM served through httpx.MockTransport and a
SubmissionHandler wired to it.
"""
import json
from datetime import date

import httpx
import pytest

from app.core.config import CrmConfig
from app.core.submission_handler import SubmissionHandler
from app.core.twenty_crm import TwentyCrmClient

TEST_API_URL = "https://crm.example.test/rest"
SUBMITTED_ON = date(2026, 3, 7)


class FakeTwenty:
    """Records every request and answers /people and /notes with canned responses"""

    def __init__(self):
        self.requests = []
        self.responses = {
            "people": (201, {"data": {"createPerson": {"id": "person-123"}}}),
            "notes": (201, {"data": {"createNote": {"id": "note-456"}}}),
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        response = self.responses[endpoint]
        if isinstance(response, Exception):
            raise response
        status_code, payload = response
        if isinstance(payload, str):
            return httpx.Response(status_code, text=payload)
        return httpx.Response(status_code, json=payload)

    def payloads(self, endpoint):
        return [json.loads(r.content) for r in self.requests if r.url.path.endswith(f"/{endpoint}")]


@pytest.fixture
def fake_twenty():
    return FakeTwenty()


@pytest.fixture
def crm_config():
    return CrmConfig(api_key="test-key", api_url=TEST_API_URL)


@pytest.fixture
def crm_client(crm_config, fake_twenty):
    return TwentyCrmClient(crm_config, transport=httpx.MockTransport(fake_twenty))


@pytest.fixture
def submission_handler(crm_config, crm_client):
    return SubmissionHandler(crm_config, crm_client=crm_client, today=lambda: SUBMITTED_ON)


@pytest.fixture
def ada():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "(555) 123-4567",
        "message": "Interested",
        "privacy": "on",
    }
