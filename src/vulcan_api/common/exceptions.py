"""Translate errors raised while serving a request into Problem Details.

Domain errors from the authorization core map onto fixed problem types:

* ``AuthenticationError`` -> 401 ``unauthorized``
* ``NotAuthorizedError`` -> 403 ``forbidden``
* ``ResourceNotFoundError`` -> 404 ``not_found``
* ``RecordInvalidError`` -> 422 ``validation_error`` with one item per message
* ``RuleLockedError`` -> 423 ``rule_locked``

Anything else becomes an opaque 500 logged with its stack trace.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeAlias, cast

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from vulcan_api.common.logging import log_context
from vulcan_api.common.problem_details import (
    ERROR_DEFINITIONS,
    ProblemDetailsErrorItem,
    build_problem_details,
    error_items_from_pydantic,
)
from vulcan_api.core.auth.errors import AuthenticationError, NotAuthorizedError
from vulcan_api.core.errors import RecordInvalidError, ResourceNotFoundError, RuleLockedError

_UNHANDLED_LOGGER = logging.getLogger("vulcan_api.errors")
_HTTP_LOGGER = logging.getLogger("vulcan_api.http")
_PROBLEM_MEDIA_TYPE = "application/problem+json"

ExceptionHandler: TypeAlias = Callable[[Request, Exception], Response | Awaitable[Response]]


def _problem_response(
    request: Request,
    *,
    status_code: int,
    detail: str | None,
    errors: list[ProblemDetailsErrorItem] | None = None,
    error_type: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    problem = build_problem_details(
        status_code=status_code,
        instance=request.url.path,
        request_id=getattr(request.state, "request_id", None),
        detail=detail,
        errors=errors,
        error_type=error_type,
    )
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(mode="json", by_alias=True, exclude_none=True),
        media_type=_PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


# --- Domain errors ----------------------------------------------------------


def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    return _problem_response(
        request,
        status_code=401,
        detail=str(exc) or "Authentication required",
        error_type=ERROR_DEFINITIONS["unauthorized"].type,
    )


def not_authorized_handler(request: Request, exc: NotAuthorizedError) -> JSONResponse:
    return _problem_response(
        request,
        status_code=403,
        detail=str(exc),
        error_type=ERROR_DEFINITIONS["forbidden"].type,
    )


def not_found_handler(request: Request, exc: ResourceNotFoundError) -> JSONResponse:
    return _problem_response(
        request,
        status_code=404,
        detail=str(exc),
        error_type=ERROR_DEFINITIONS["not_found"].type,
    )


def record_invalid_handler(request: Request, exc: RecordInvalidError) -> JSONResponse:
    errors = [
        ProblemDetailsErrorItem(path=field, message=message, code="invalid")
        for field, messages in exc.field_errors.items()
        for message in messages
    ]
    return _problem_response(
        request,
        status_code=422,
        detail=exc.summary or "Record is invalid",
        errors=errors,
        error_type=ERROR_DEFINITIONS["validation_error"].type,
    )


def rule_locked_handler(request: Request, exc: RuleLockedError) -> JSONResponse:
    return _problem_response(
        request,
        status_code=423,
        detail=str(exc),
        error_type=ERROR_DEFINITIONS["rule_locked"].type,
    )


# --- Framework errors -------------------------------------------------------


def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    return _problem_response(
        request,
        status_code=422,
        detail="Invalid request",
        errors=error_items_from_pydantic(exc.errors()),
    )


def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) and explicit ``HTTPException``s."""

    if exc.status_code >= 500:
        _HTTP_LOGGER.error(
            "http_exception",
            extra=log_context(
                path=request.url.path,
                method=request.method,
                status_code=exc.status_code,
                detail=exc.detail,
            ),
        )
        detail = "Internal server error"
    else:
        detail = exc.detail if isinstance(exc.detail, str) else None
    return _problem_response(
        request,
        status_code=exc.status_code,
        detail=detail,
        headers=exc.headers,
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    _UNHANDLED_LOGGER.exception(
        "unhandled_exception",
        extra=log_context(
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
        ),
    )
    return _problem_response(request, status_code=500, detail="Internal server error")


_HANDLERS: tuple[tuple[type[Exception], Callable[..., Response]], ...] = (
    (RequestValidationError, request_validation_exception_handler),
    (HTTPException, http_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (AuthenticationError, authentication_error_handler),
    (NotAuthorizedError, not_authorized_handler),
    (ResourceNotFoundError, not_found_handler),
    (RecordInvalidError, record_invalid_handler),
    (RuleLockedError, rule_locked_handler),
    (Exception, unhandled_exception_handler),
)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every Problem Details handler to ``app``."""

    for exc_type, handler in _HANDLERS:
        app.add_exception_handler(exc_type, cast(ExceptionHandler, handler))


__all__ = [
    "authentication_error_handler",
    "http_exception_handler",
    "not_authorized_handler",
    "not_found_handler",
    "record_invalid_handler",
    "register_exception_handlers",
    "request_validation_exception_handler",
    "rule_locked_handler",
    "unhandled_exception_handler",
]
