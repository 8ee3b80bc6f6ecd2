"""
PIN Reset Use Case DTOs
"""

from pydantic import BaseModel


class RequestPinResetResponse(BaseModel):
    """Response for request PIN reset use case"""

    status: str
    message: str


class ConfirmPinResetResponse(BaseModel):
    """Response for confirm PIN reset use case"""

    status: str
    message: str
