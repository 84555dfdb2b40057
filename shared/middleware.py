"""Request ID middleware and the problem+json exception handlers."""

from collections.abc import Callable
from contextvars import ContextVar
from uuid import uuid4

import structlog
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from shared.exceptions import GENERIC_SERVER_ERROR, PROBLEM_BASE_URI, ProblemDetailError

logger = structlog.get_logger()

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an X-Request-ID.

    A client-supplied header is echoed back; otherwise a UUID v4 is minted.
    The id is bound into structlog's context for the lifetime of the request.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Callable[..., Response]]
    ):
        rid = request.headers.get("X-Request-ID") or str(uuid4())
        request_id_var.set(rid)
        structlog.contextvars.bind_contextvars(request_id=rid)

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await unhandled_exception_handler(request, exc)
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id")


def problem_response(
    request: Request,
    status: int,
    title: str,
    detail: str,
    type_uri: str = "about:blank",
    **extra,
) -> JSONResponse:
    body = {
        "type": type_uri,
        "title": title,
        "status": status,
        "detail": detail,
        "instance": str(request.url.path),
        **extra,
    }
    return JSONResponse(status_code=status, content=body, media_type="application/problem+json")


async def problem_detail_handler(request: Request, exc: ProblemDetailError) -> JSONResponse:
    log = logger.error if exc.status >= 500 else logger.warning
    log("problem_response", status=exc.status, title=exc.title, path=str(request.url.path))
    return problem_response(request, exc.status, exc.title, exc.detail, exc.type_uri)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies and path/query params as 422 with one violation per error."""
    violations = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        violations.append(
            {
                "field": field or "(root)",
                "message": err.get("msg", "Validation error"),
                "constraint": err.get("type", "validation"),
            }
        )

    logger.info("request_rejected", path=str(request.url.path), violations=len(violations))
    return problem_response(
        request,
        422,
        "Validation Error",
        f"Request contains {len(violations)} validation error(s)",
        f"{PROBLEM_BASE_URI}/validation-error",
        violations=violations,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, str):
        title, detail = exc.detail, exc.detail
    else:
        title, detail = "Error", str(exc.detail)
    return problem_response(request, exc.status_code, title, detail)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Internal detail is logged only
    logger.error("unhandled_exception", path=str(request.url.path), exc_info=exc)
    return problem_response(request, 500, "Internal Server Error", GENERIC_SERVER_ERROR)
