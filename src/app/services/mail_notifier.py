from abc import ABC, abstractmethod


class IMailNotifier(ABC):
    """Outbound mail transport - application layer"""

    @abstractmethod
    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        """
        Send one message.

        Returns True once the transport accepted the message, False on any
        delivery failure or timeout. Never raises for transport errors.
        """
        pass
