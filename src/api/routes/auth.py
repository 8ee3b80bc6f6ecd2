from email.utils import formatdate
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, ConfigDict

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.app.services.mail_notifier import IMailNotifier
from src.app.services.rate_limiter import IRateLimiter
from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import PinResetSettings
from src.app.use_cases.pin_reset import (
    RequestPinResetUseCase,
    ConfirmPinResetUseCase,
    RequestPinResetResponse,
    ConfirmPinResetResponse,
)
from src.app.use_cases.pin_reset.errors import (
    AUTHZ_ERRORS,
    RATE_LIMITED,
    VALIDATION_ERRORS,
)
from src.depends import (
    get_mail_notifier,
    get_rate_limiter,
    get_reset_settings,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def raise_for_error(error: Error):
    """
    Map a PIN reset error code to its HTTP response.

    - Validation and authorization errors: 400
    - Rate limited: 429 with Retry-After set to the window reset instant
    - Anything else (mail, hashing, limiter store): 500
    """
    if error.code in VALIDATION_ERRORS or error.code in AUTHZ_ERRORS:
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    if error.code == RATE_LIMITED:
        reset_at = error.details["reset_at"]
        raise ClientError(
            Error(error.code, error.message, {"retry_after": error.details["retry_after"]}),
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"Retry-After": formatdate(reset_at, usegmt=True)},
        )
    raise ServerError(error)


class ForgotPinRequest(BaseModel):
    """
    Forgot PIN HTTP request payload

    The email is optional at the schema level so a missing value is
    reported as EMAIL_REQUIRED (400) by the use case.
    """

    email: Optional[str] = Field(None, description="Institutional email address")


@router.post("/forgot-pin", status_code=status.HTTP_200_OK, response_model=RequestPinResetResponse)
async def forgot_pin(
    request: ForgotPinRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    rate_limiter: IRateLimiter = Depends(get_rate_limiter),
    mail_notifier: IMailNotifier = Depends(get_mail_notifier),
    settings: PinResetSettings = Depends(get_reset_settings),
):
    """
    Request PIN Reset

    Issues a 30-minute single-use reset token and emails a reset link.

    Security:
        - No account enumeration (same response for known/unknown emails)
        - Rate limited per email; attempts count only once the email is sent

    Raises:
        - 400 Bad Request: Missing email, wrong domain, bad enrollment id,
          unverified account
        - 429 Too Many Requests: Rate limit exceeded
        - 500 Internal Server Error: Email delivery failed
    """
    use_case = RequestPinResetUseCase(uow, rate_limiter, mail_notifier, settings)
    result = await use_case.execute(request.email)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ResetPinRequest(BaseModel):
    """
    Reset PIN HTTP request payload

    Accepts newPin (as sent by the web client) or new_pin.
    """

    model_config = ConfigDict(populate_by_name=True)

    token: Optional[str] = Field(None, description="Reset token from email link")
    new_pin: Optional[str] = Field(None, alias="newPin", description="New numeric PIN")


@router.post("/reset-pin", status_code=status.HTTP_200_OK, response_model=ConfirmPinResetResponse)
async def reset_pin(
    request: ResetPinRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    rate_limiter: IRateLimiter = Depends(get_rate_limiter),
    settings: PinResetSettings = Depends(get_reset_settings),
):
    """
    Confirm PIN Reset

    Verifies the reset token and sets the new PIN. The token is cleared so
    it cannot be used again.

    Raises:
        - 400 Bad Request: Missing fields, invalid PIN format, or
          invalid/expired token (one generic message)
        - 429 Too Many Requests: Rate limit exceeded
        - 500 Internal Server Error: PIN hashing failed
    """
    use_case = ConfirmPinResetUseCase(uow, rate_limiter, settings)
    result = await use_case.execute(request.token, request.new_pin)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
