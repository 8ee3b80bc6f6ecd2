"""
Runtime settings for the PIN reset workflow.

Built from ApplicationConfig in src.depends and handed to each component
at construction. Secret fields are required: a missing signing secret,
link base URL or mail credential raises pydantic.ValidationError.
"""

from pydantic import BaseModel, Field


class PinResetSettings(BaseModel):
    institution_domain: str = Field(..., min_length=1)
    app_name: str = "Blind CURAJ"
    app_url: str = Field(..., min_length=1, description="Base URL used in reset links")
    token_secret: str = Field(..., min_length=16, description="HS256 signing secret")
    token_ttl_minutes: int = Field(30, gt=0)
    rate_limit_max_attempts: int = Field(3, gt=0)
    rate_limit_window_seconds: int = Field(3600, gt=0)
    pin_min_length: int = Field(4, gt=0)
    pin_max_length: int = Field(6, gt=0)
    bcrypt_rounds: int = Field(10, ge=4, le=31)


class MailSettings(BaseModel):
    host: str
    port: int = 587
    user: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    from_name: str = "Blind CURAJ"
    timeout_seconds: float = Field(10, gt=0)
