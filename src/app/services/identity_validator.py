"""
Identity Validator

Confirms an email belongs to the institution and that its local part is
a well-formed enrollment id such as 2021CSB042.
"""

import re
from typing import Optional

from pydantic import BaseModel

from libs.result import Error, Result, Return

# ASCII only; matched against the whole local part
ENROLLMENT_ID_PATTERN = re.compile(r"[0-9]{4}[A-Za-z]+[0-9]{3}")


class ValidatedIdentity(BaseModel):
    email: str
    enrollment_id: str


class IdentityValidator:
    """
    Rules, applied in order (first failure wins):
    - EMAIL_REQUIRED: email is empty
    - INVALID_EMAIL_DOMAIN: email does not end with @<institution domain>
    - INVALID_ENROLLMENT_ID: local part is not 4 ASCII digits, one or
      more ASCII letters, 3 ASCII digits
    """

    def __init__(self, institution_domain: str):
        self.suffix = f"@{institution_domain}"

    def validate(self, email: Optional[str]) -> Result[ValidatedIdentity]:
        email = (email or "").strip()
        if not email:
            return Return.err(Error("EMAIL_REQUIRED", "Email is required"))

        if not email.endswith(self.suffix):
            return Return.err(
                Error(
                    "INVALID_EMAIL_DOMAIN",
                    f"Invalid email domain. Must be a {self.suffix} email address.",
                )
            )

        local_part = email[: -len(self.suffix)]
        if not ENROLLMENT_ID_PATTERN.fullmatch(local_part):
            return Return.err(
                Error("INVALID_ENROLLMENT_ID", "Invalid enrollment ID format")
            )

        return Return.ok(ValidatedIdentity(email=email, enrollment_id=local_part.upper()))
