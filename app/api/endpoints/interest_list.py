"""
Interest list signup route.

Thin FastAPI adapter around SubmissionHandler: the route accepts every common
verb so the handler can answer OPTIONS preflights and reject the rest with a
405 body of its own.
"""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
import logging

from app.core.config import CrmConfig, get_settings
from app.core.submission_handler import SubmissionHandler

router = APIRouter()
logger = logging.getLogger(__name__)

ACCEPTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_crm_config() -> CrmConfig:
    return get_settings().crm_config()


def get_submission_handler(config: CrmConfig = Depends(get_crm_config)) -> SubmissionHandler:
    return SubmissionHandler(config)


@router.api_route("/join-interest-list", methods=ACCEPTED_METHODS)
async def join_interest_list(
    request: Request,
    handler: SubmissionHandler = Depends(get_submission_handler),
):
    """
    Receive a "join interest list" form post and forward it to TwentyCRM.

    Accepts JSON, multipart/form-data and url-encoded bodies. Always answers
    200 once validation passes, even if the CRM could not be reached.
    """
    body = await request.body()
    result = await handler.handle(request.method, request.headers, body)

    if result.body is None:
        return Response(content="", status_code=result.status_code, headers=result.headers)

    return JSONResponse(content=result.body, status_code=result.status_code, headers=result.headers)
