"""
Use Cases

Organized into domain folders:
- pin_reset/: PIN reset request and confirmation
"""

from .pin_reset import (
    RequestPinResetUseCase,
    ConfirmPinResetUseCase,
)

__all__ = [
    "RequestPinResetUseCase",
    "ConfirmPinResetUseCase",
]
