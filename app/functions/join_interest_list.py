"""
Serverless entry point for the interest list form.

Takes a Netlify / AWS Lambda style event ({httpMethod, headers, body,
isBase64Encoded}) and returns {statusCode, headers, body}, running the same
SubmissionHandler as the FastAPI route.
"""

import asyncio
import base64
import json
import logging

from app.core.config import get_settings
from app.core.submission_handler import SubmissionHandler, UNEXPECTED_ERROR_MESSAGE

logger = logging.getLogger()
logger.setLevel(logging.INFO)


def _event_body(event):
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8") if isinstance(body, str) else body


def _response(result):
    return {
        "statusCode": result.status_code,
        "headers": result.headers,
        "body": result.body_text(),
    }


def handler(event, context, submission_handler=None):
    method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    headers = event.get("headers") or {}

    try:
        body = _event_body(event)
    except ValueError:
        logger.exception("Could not decode base64 event body")
        return {
            "statusCode": 500,
            "headers": {"Content-Type": "application/json", "Access-Control-Allow-Origin": "*"},
            "body": json.dumps({"success": False, "error": UNEXPECTED_ERROR_MESSAGE}),
        }

    if submission_handler is None:
        submission_handler = SubmissionHandler(get_settings().crm_config())

    result = asyncio.run(submission_handler.handle(method, headers, body))
    return _response(result)
