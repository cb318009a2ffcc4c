from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import BaseModel


class DeliveryResult(BaseModel):
    """Outcome reported by a notification sender"""

    delivered: bool
    detail: Optional[str] = None


class INotificationSender(ABC):
    """Delivers a reset token to a contact address"""

    @abstractmethod
    async def send(
        self, address: str, token: str, context: Dict[str, Any]
    ) -> DeliveryResult:
        """
        Send the token to address.

        Failures may be reported either as DeliveryResult(delivered=False)
        or by raising; callers treat both as non-fatal.
        """
        pass
