import logging

import bcrypt

from libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class PinHasher:
    """bcrypt hashing for numeric PINs"""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    def hash(self, pin: str) -> Result[str]:
        try:
            pin_hash = bcrypt.hashpw(pin.encode(), bcrypt.gensalt(self.rounds))
        except (TypeError, ValueError) as e:
            logger.error(f"PIN hashing failed: {e}")
            return Return.err(Error("PIN_HASH_FAILED", "Failed to reset PIN"))
        return Return.ok(pin_hash.decode())

    def verify(self, pin: str, pin_hash: str) -> bool:
        try:
            return bcrypt.checkpw(pin.encode(), pin_hash.encode())
        except ValueError:
            return False
