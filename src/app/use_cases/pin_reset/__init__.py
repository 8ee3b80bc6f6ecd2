"""
PIN Reset Use Cases

Two-phase workflow: request a reset token by email, then confirm it with
a new PIN.
"""

from .request_pin_reset_use_case import RequestPinResetUseCase
from .confirm_pin_reset_use_case import ConfirmPinResetUseCase
from .dtos import RequestPinResetResponse, ConfirmPinResetResponse

__all__ = [
    # Use Cases
    "RequestPinResetUseCase",
    "ConfirmPinResetUseCase",
    # DTOs - Responses
    "RequestPinResetResponse",
    "ConfirmPinResetResponse",
]
