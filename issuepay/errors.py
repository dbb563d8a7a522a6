from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class IssuePayError(Exception):
    status_code = 500
    message = "internal error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(IssuePayError):
    status_code = 400
    message = "invalid request"


class Unauthorized(IssuePayError):
    status_code = 401
    message = "unauthorized access"


class Forbidden(IssuePayError):
    status_code = 403
    message = "forbidden access"


class NotFound(IssuePayError):
    status_code = 404
    message = "not found"


class UpstreamError(IssuePayError):
    status_code = 502
    message = "upstream service error"


class ConflictIgnored(IssuePayError):
    """Duplicate write of an already recorded fact. Handled, never returned to clients."""
    status_code = 200
    message = "already exist"


async def issuepay_error_handler(request: Request, exc: IssuePayError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(IssuePayError, issuepay_error_handler)
