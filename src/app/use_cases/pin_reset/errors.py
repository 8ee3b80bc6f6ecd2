"""
PIN reset error codes, grouped by how the API layer answers them.
"""

from libs.result import Error

# ValidationError: malformed input, 400, specific about the failed rule
VALIDATION_ERRORS = frozenset(
    {
        "EMAIL_REQUIRED",
        "INVALID_EMAIL_DOMAIN",
        "INVALID_ENROLLMENT_ID",
        "MISSING_FIELDS",
        "INVALID_PIN",
    }
)

# AuthzError: 400, deliberately vague for token failures
AUTHZ_ERRORS = frozenset({"EMAIL_NOT_VERIFIED", "INVALID_TOKEN"})

# RateLimitError: 429 with retry_after (minutes) and reset_at (unix seconds)
RATE_LIMITED = "RATE_LIMITED"

# Anything else (EMAIL_DELIVERY_FAILED, PIN_HASH_FAILED, RATE_LIMITER_UNAVAILABLE)
# is a DependencyError: 500, generic message to the caller

NEUTRAL_REQUEST_MESSAGE = (
    "If an account exists with this enrollment ID, you will receive PIN reset instructions."
)


def rate_limited(retry_after: int, reset_at: int) -> Error:
    return Error(
        RATE_LIMITED,
        "Too many reset attempts",
        {"retry_after": retry_after, "reset_at": reset_at},
    )


RATE_LIMITER_UNAVAILABLE = Error(
    "RATE_LIMITER_UNAVAILABLE", "Failed to process request"
)
