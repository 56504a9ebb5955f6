"""Error taxonomy shared by the API services and the timer client.

Services raise these; routers turn them into HTTP responses with
``to_http_exception`` and the client turns HTTP responses back into them
with ``error_for_status``.
"""
from fastapi import HTTPException, status


class InvalidInputError(ValueError):
    """Request is malformed or violates a time-entry rule."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ValueError):
    """Referenced task, project, entry or user does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(ValueError):
    """Referenced row exists but belongs to another user."""

    status_code = status.HTTP_403_FORBIDDEN


class TimerConflictError(ValueError):
    """Another open entry kept appearing while starting a timer."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedError(Exception):
    """Caller identity is missing or invalid."""

    status_code = status.HTTP_401_UNAUTHORIZED


_BY_STATUS = {
    cls.status_code: cls
    for cls in (
        InvalidInputError,
        NotFoundError,
        ForbiddenError,
        TimerConflictError,
        UnauthorizedError,
    )
}


def to_http_exception(error: Exception) -> HTTPException:
    """
    Convert a service error into an HTTPException.

    Plain ValueErrors are treated as bad input.
    """
    status_code = getattr(error, "status_code", status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=str(error))


def error_for_status(status_code: int, detail: str) -> Exception | None:
    """Map an HTTP error status back to an exception instance, if known."""
    cls = _BY_STATUS.get(status_code)
    if cls is None:
        return None
    return cls(detail)
