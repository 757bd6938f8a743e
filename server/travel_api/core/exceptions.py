"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

PROBLEM_BASE_URI = "https://travel-booking.example.com/problems"


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
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details: Dict[str, Any] = {
            "type": self.type_uri,
            "title": self.title,
            "status": status_code,
        }
        if detail:
            self.problem_details["detail"] = detail
        if self.instance:
            self.problem_details["instance"] = self.instance
        self.problem_details.update(self.extensions)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    @property
    def code(self) -> Optional[str]:
        """Application-specific error code, when one was attached."""
        return self.problem_details.get("code")


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[list[dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {"code": "VALIDATION_FAILED"}
        if violations:
            extensions["violations"] = violations

        super().__init__(
            status_code=422,
            title="Validation Error",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Authorization credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authorization Required",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception for authorization errors."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_roles: Optional[Iterable[str]] = None,
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {}
        if required_roles:
            extensions["required_roles"] = list(required_roles)

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[Any] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id is not None:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions: Dict[str, Any] = {"resource_type": resource_type}
        if resource_id is not None:
            extensions["resource_id"] = str(resource_id)

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/resource-not-found",
            instance=instance,
            extensions=extensions,
        )
        self.resource_type = resource_type


class ConflictError(ProblemDetailsException):
    """Exception for resource conflict errors."""

    def __init__(
        self,
        detail: str = "The request conflicts with the current state of the resource",
        conflicting_resource: Optional[Dict[str, Any]] = None,
        code: Optional[str] = None,
        title: str = "Resource Conflict",
        type_slug: str = "resource-conflict",
        instance: Optional[str] = None,
    ):
        extensions: Dict[str, Any] = {}
        if code:
            extensions["code"] = code
            extensions["retryable"] = False
        if conflicting_resource:
            extensions["conflicting_resource"] = conflicting_resource

        super().__init__(
            status_code=409,
            title=title,
            detail=detail,
            type_uri=f"{PROBLEM_BASE_URI}/{type_slug}",
            instance=instance,
            extensions=extensions,
        )


# Booking allocation exceptions

class InsufficientCapacityError(ConflictError):
    """Requested travelers exceed the package's available slots."""

    def __init__(self, package_id: int, requested: int, available: int):
        super().__init__(
            detail=(
                f"Package {package_id} has insufficient capacity. "
                f"Requested: {requested}, Available: {available}"
            ),
            conflicting_resource={
                "package_id": package_id,
                "requested_travelers": requested,
                "available_slots": available,
            },
            code="FULL",
            title="Insufficient Capacity",
            type_slug="insufficient-capacity",
        )
        self.requested = requested
        self.available = available


class PackageUnavailableError(ConflictError):
    """The package exists but is not open for booking."""

    def __init__(self, package_id: int):
        super().__init__(
            detail=f"Package {package_id} is not active and cannot be booked",
            conflicting_resource={"package_id": package_id},
            code="PACKAGE_INACTIVE",
            title="Package Unavailable",
            type_slug="package-unavailable",
        )


class CapacityConflictError(ConflictError):
    """A capacity edit would leave fewer slots than are already booked."""

    def __init__(self, package_id: int, requested_capacity: int, booked_slots: int):
        super().__init__(
            detail=(
                f"Cannot set capacity of package {package_id} to {requested_capacity}: "
                f"{booked_slots} slots are already booked"
            ),
            conflicting_resource={
                "package_id": package_id,
                "requested_capacity": requested_capacity,
                "booked_slots": booked_slots,
            },
            code="CAPACITY_CONFLICT",
            title="Capacity Conflict",
            type_slug="capacity-conflict",
        )


class AlreadyCancelledError(ConflictError):
    """The booking was already cancelled; nothing was changed."""

    def __init__(self, booking_id: int):
        super().__init__(
            detail=f"Booking {booking_id} is already cancelled",
            conflicting_resource={"booking_id": booking_id},
            code="ALREADY_CANCELLED",
            title="Booking Already Cancelled",
            type_slug="already-cancelled",
        )


class InvalidStatusError(ProblemDetailsException):
    """The requested booking status is not a recognised value."""

    def __init__(self, value: Any, allowed: Iterable[str]):
        allowed = list(allowed)
        super().__init__(
            status_code=400,
            title="Invalid Booking Status",
            detail=f"'{value}' is not a valid booking status. Allowed values: {', '.join(allowed)}",
            type_uri=f"{PROBLEM_BASE_URI}/invalid-status",
            extensions={
                "code": "INVALID_STATUS",
                "retryable": False,
                "allowed_statuses": allowed,
            },
        )


class InvalidTransitionError(ConflictError):
    """The booking cannot move from its current status to the requested one."""

    def __init__(self, booking_id: int, current: str, target: str):
        super().__init__(
            detail=f"Booking {booking_id} cannot transition from {current} to {target}",
            conflicting_resource={
                "booking_id": booking_id,
                "current_status": current,
                "requested_status": target,
            },
            code="INVALID_TRANSITION",
            title="Invalid Status Transition",
            type_slug="invalid-transition",
        )


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    content = dict(exc.problem_details)
    content.setdefault("instance", request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI request validation failures as Problem Details."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    problem = ValidationError(violations=violations, instance=request.url.path)
    return await problem_details_handler(request, problem)


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
        "type": f"{PROBLEM_BASE_URI}/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": request.url.path,
        "error_id": error_id,
        "timestamp": _timestamp(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type="application/problem+json",
    )
