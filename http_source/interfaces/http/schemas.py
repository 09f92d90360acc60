"""
Response schemas and error rendering for the HTTP interface.
"""

from typing import Dict, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response model."""

    error_code: str
    description: str
    error_detail: Optional[str] = None
    solution: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "UP"
    version: str
    sink: str


class CsrfTokenResponse(BaseModel):
    """CSRF token issued to an authenticated client."""

    token: str
    header_name: str


def error_response(
    status_code: int,
    error_code: str,
    description: str,
    error_detail: Optional[str] = None,
    solution: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        description=description,
        error_detail=error_detail,
        solution=solution,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)
