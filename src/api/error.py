"""API error mapping

Use case errors are raised as ClientError and rendered as
{"error": {"code": ..., "message": ...}}.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from libs.result import Error


class ClientError(Exception):
    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    body = {
        "code": exc.error.code,
        "message": exc.error.message,
    }
    if exc.error.details is not None:
        body["details"] = exc.error.details
    return JSONResponse(status_code=exc.status_code, content={"error": body})
