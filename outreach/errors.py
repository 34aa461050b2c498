"""
Error types and the shared error responder.
"""

from fastapi import status
from fastapi.responses import JSONResponse


class PatientValidationError(Exception):
    """A request field failed one of the patient validation rules."""

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg


class StoreError(Exception):
    """The document store failed to serve a read."""


def error_response(message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    """Build the generic error payload returned for store and not-found failures."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )
