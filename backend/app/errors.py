"""
Problem-details error rendering for the Scheduler API.

Every error leaves the service as a JSON body with
``type, title, status, detail, instance`` plus ``code`` and ``errors``
when known.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status as http_status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def _title_from_status(status_code: int) -> str:
    mapping = {
        400: "Bad Request",
        401: "Unauthorized",
        403: "Forbidden",
        404: "Not Found",
        405: "Method Not Allowed",
        500: "Internal Server Error",
    }
    return mapping.get(status_code, "Error")


def _problem(
    *,
    status: int,
    title: Optional[str] = None,
    detail: Optional[str] = None,
    instance: Optional[str] = None,
    type_: str = "about:blank",
    code: Optional[str] = None,
    errors: Optional[Any] = None,
) -> Dict[str, Any]:
    problem: Dict[str, Any] = {
        "type": type_,
        "title": title or _title_from_status(status),
        "status": status,
        "detail": detail or "",
        "instance": instance or "",
    }
    if code:
        problem["code"] = code
    if errors is not None:
        problem["errors"] = errors
    return problem


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    if isinstance(detail, dict):
        code = detail.get("code") if isinstance(detail.get("code"), str) else None
        message = detail.get("message") or detail.get("detail")
        detail_text = message if isinstance(message, str) else None
        errors = detail.get("details") or detail.get("errors")
        return detail_text, code, errors
    if isinstance(detail, str):
        return detail, None, None
    if detail is None:
        return None, None, None
    return str(detail), None, None


def _http_problem_response(
    request: Request, status_code: int, detail: Any, headers: Optional[Dict[str, str]]
) -> JSONResponse:
    detail_text, code, errors = _parse_detail(detail)
    problem = _problem(
        status=status_code,
        detail=detail_text,
        instance=request.url.path,
        code=code,
        errors=jsonable_encoder(errors) if errors is not None else None,
    )
    return JSONResponse(
        problem,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


def _validation_response(request: Request, errors: Any, detail: str) -> JSONResponse:
    problem = _problem(
        status=http_status.HTTP_400_BAD_REQUEST,
        detail=detail,
        instance=request.url.path,
        code="VALIDATION_ERROR",
        errors=jsonable_encoder(errors),
    )
    return JSONResponse(
        problem,
        status_code=http_status.HTTP_400_BAD_REQUEST,
        media_type=PROBLEM_MEDIA_TYPE,
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _http_problem_response(request, exc.status_code, exc.detail, exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _http_problem_response(request, exc.status_code, exc.detail, exc.headers)

    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        http_exc = exc.to_http_exception()
        return _http_problem_response(
            request, http_exc.status_code, http_exc.detail, http_exc.headers
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _validation_response(request, exc.errors(), "Request validation failed")

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _validation_response(request, exc.errors(), "Validation failed")

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        problem = _problem(
            status=500,
            detail="Internal Server Error",
            instance=request.url.path,
            code="internal_server_error",
        )
        return JSONResponse(problem, status_code=500, media_type=PROBLEM_MEDIA_TYPE)
