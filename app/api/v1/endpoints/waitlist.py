from fastapi import APIRouter, Depends, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Optional
import logging

from app.core.database import MongoConnector, get_connector
from app.schemas.waitlist import (
    ErrorResponse,
    WaitlistCountResponse,
    WaitlistJoinFailure,
    WaitlistJoinRequest,
    WaitlistJoinSuccess,
)
from app.services.waitlist_service import JoinRejected, WaitlistService

logger = logging.getLogger(__name__)

router = APIRouter()

# Sent on every response of this route, whatever the outcome
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

WAITLIST_PATH = "/waitlist"

JOIN_FAILED_MESSAGE = "Something went wrong. Please try again."


def _respond(status_code: int, body: Optional[BaseModel] = None) -> Response:
    if body is None:
        return Response(status_code=status_code, headers=CORS_HEADERS)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=CORS_HEADERS)


def get_waitlist_service(connector: MongoConnector = Depends(get_connector)) -> WaitlistService:
    return WaitlistService(connector)


async def _read_join_request(request: Request) -> WaitlistJoinRequest:
    """Parse the body leniently; anything unusable counts as a missing email."""
    try:
        data = await request.json()
    except ValueError:
        return WaitlistJoinRequest()
    if not isinstance(data, dict):
        return WaitlistJoinRequest()
    try:
        return WaitlistJoinRequest.model_validate(data)
    except PydanticValidationError:
        return WaitlistJoinRequest()


@router.options(WAITLIST_PATH, include_in_schema=False)
async def waitlist_preflight():
    return _respond(status.HTTP_200_OK)


@router.get(
    WAITLIST_PATH,
    response_model=WaitlistCountResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_waitlist_count(service: WaitlistService = Depends(get_waitlist_service)):
    """Number of emails on the waitlist"""
    try:
        count = await service.count()
    except Exception:
        logger.exception("Error getting waitlist count")
        return _respond(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorResponse(error="Failed to get count"))
    return _respond(status.HTTP_200_OK, WaitlistCountResponse(count=count))


@router.post(
    WAITLIST_PATH,
    response_model=WaitlistJoinSuccess,
    responses={400: {"model": WaitlistJoinFailure}, 500: {"model": WaitlistJoinFailure}},
)
async def join_waitlist(request: Request, service: WaitlistService = Depends(get_waitlist_service)):
    """
    Add an email to the waitlist and return the new total.
    Invalid or already registered emails are rejected with 400.
    """
    try:
        payload = await _read_join_request(request)
        result = await service.join(payload.email)
    except Exception:
        logger.exception("Error adding email to waitlist")
        return _respond(status.HTTP_500_INTERNAL_SERVER_ERROR, WaitlistJoinFailure(message=JOIN_FAILED_MESSAGE))

    if isinstance(result, JoinRejected):
        return _respond(status.HTTP_400_BAD_REQUEST, WaitlistJoinFailure(message=result.message))
    return _respond(status.HTTP_200_OK, WaitlistJoinSuccess(message=result.message, count=result.count))


_WAITLIST_ENDPOINTS = (waitlist_preflight, get_waitlist_count, join_waitlist)


async def waitlist_method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """405 for any method the waitlist route does not serve, in the route's own shape."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED and request.scope.get("endpoint") in _WAITLIST_ENDPOINTS:
        return _respond(status.HTTP_405_METHOD_NOT_ALLOWED, ErrorResponse(error="Method not allowed"))
    return await http_exception_handler(request, exc)
