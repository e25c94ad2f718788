"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        # Create the problem details object
        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        # Add extensions
        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors (400, itemized reasons)."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        code: str = "VALIDATION_ERROR",
        missing: Optional[List[str]] = None,
        invalid: Optional[List[Dict[str, Any]]] = None,
        errors: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {"code": code, "error": detail}
        if missing is not None:
            extensions["missing"] = missing
        if invalid is not None:
            extensions["invalid"] = invalid
        if errors:
            extensions["errors"] = errors

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri="https://oceantours.example/problems/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for missing or invalid sessions."""

    def __init__(
        self,
        detail: str = "Authorization is required to access this resource",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authorization Required",
            detail=detail,
            type_uri="https://oceantours.example/problems/authorization-required",
            instance=instance,
            extensions={"code": "UNAUTHORIZED", "error": "Unauthorized"},
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception for sessions without the required role."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_role: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {"code": "FORBIDDEN", "error": "Forbidden"}
        if required_role:
            extensions["required_role"] = required_role

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri="https://oceantours.example/problems/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """
    Exception for resource not found errors.

    Lookups of a path resource answer 404. Lookups of a resource referenced
    from a request body are client errors and pass ``status_code=400`` along
    with the offending field name in ``missing``.
    """

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        status_code: int = 404,
        missing: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions: Dict[str, Any] = {
            "code": "NOT_FOUND",
            "error": detail,
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id
        if missing:
            extensions["missing"] = missing

        super().__init__(
            status_code=status_code,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://oceantours.example/problems/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {"code": "CONFLICT", "error": detail}
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title="Resource Conflict",
            detail=detail,
            type_uri="https://oceantours.example/problems/resource-conflict",
            instance=instance,
            extensions=extensions,
        )


class IdempotencyMismatchError(ProblemDetailsException):
    """Exception when an idempotency key is reused with a different request body."""

    def __init__(self, idempotency_key: str, method: str):
        super().__init__(
            status_code=422,
            title="Idempotency Key Mismatch",
            detail=f"Idempotency key '{idempotency_key}' was already used for '{method}' with a different request body",
            type_uri="https://oceantours.example/problems/idempotency-key-mismatch",
            extensions={
                "code": "IDEMPOTENCY_KEY_MISMATCH",
                "error": "Idempotency key reused with a different request",
                "retryable": False,
                "idempotency_key": idempotency_key,
                "method": method,
            },
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        title: str = "Internal Server Error",
        code: str = "INTERNAL_ERROR",
        type_uri: str = "https://oceantours.example/problems/internal-server-error",
        diagnostics: Optional[Dict[str, Any]] = None,
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not error_id:
            error_id = str(uuid.uuid4())

        extensions: Dict[str, Any] = {
            "code": code,
            "error": detail,
            "error_id": error_id,
            "timestamp": _utc_timestamp(),
        }
        if diagnostics:
            extensions["details"] = diagnostics

        super().__init__(
            status_code=500,
            title=title,
            detail=detail,
            type_uri=type_uri,
            instance=instance,
            extensions=extensions,
        )


class PersistenceError(InternalServerError):
    """Store read/write failure. Store internals are attached outside production only."""

    def __init__(self, detail: str = "Failed to persist changes", store_message: Optional[str] = None):
        super().__init__(
            detail=detail,
            title="Persistence Error",
            code="PERSISTENCE_ERROR",
            type_uri="https://oceantours.example/problems/persistence-error",
            diagnostics={"store_message": store_message} if store_message else None,
        )


class UpstreamError(InternalServerError):
    """Base class for payment provider failures."""

    def __init__(
        self,
        detail: str,
        code: str,
        title: str = "Payment Provider Error",
        diagnostics: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            detail=detail,
            title=title,
            code=code,
            type_uri="https://oceantours.example/problems/payment-provider-error",
            diagnostics=diagnostics,
        )


class ProviderAuthError(UpstreamError):
    """Provider credentials are missing or were rejected by the token endpoint."""

    def __init__(self, detail: str = "Payment provider credentials are missing or invalid",
                 diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(detail=detail, code="PROVIDER_AUTH_ERROR", diagnostics=diagnostics)


class ProviderAPIError(UpstreamError):
    """The provider rejected the request or answered with a malformed body."""

    def __init__(self, detail: str = "Payment provider rejected the order",
                 status: Optional[int] = None, body: Any = None):
        diagnostics: Optional[Dict[str, Any]] = None
        if status is not None or body is not None:
            diagnostics = {"provider_status": status, "provider_body": body}
        super().__init__(detail=detail, code="PROVIDER_API_ERROR", diagnostics=diagnostics)


class OrderCreationError(UpstreamError):
    """The provider created an order but returned no approval link."""

    def __init__(self, provider_order_id: str):
        super().__init__(
            detail="Payment provider response did not include an approval link",
            code="ORDER_CREATION_ERROR",
            title="Order Creation Failed",
            diagnostics={"provider_order_id": provider_order_id},
        )


def _public_body(exc: ProblemDetailsException) -> Dict[str, Any]:
    """Drop diagnostic extensions from server errors in production."""
    from .config import settings

    body = dict(exc.problem_details)
    if exc.status_code >= 500 and settings.is_production:
        body.pop("details", None)
    return body


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=_public_body(exc),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI body/query validation failures as a 400 problem with violations."""
    violations = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        violations.append({
            "path": ".".join(location) or "body",
            "message": error.get("msg", "Invalid value"),
        })

    problem = ValidationError(
        detail="The request data failed validation",
        code="VALIDATION_ERROR",
        instance=str(request.url),
    )
    content = dict(problem.problem_details)
    content["violations"] = violations

    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "violation_count": len(violations)}
    )

    return JSONResponse(status_code=400, content=content)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    problem_details = {
        "type": "https://oceantours.example/problems/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "code": "INTERNAL_ERROR",
        "error": "Internal server error",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": _utc_timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
    )
