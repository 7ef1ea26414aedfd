from abc import ABC, abstractmethod
from typing import Any, Optional

from src.service.marketplace.domain.entity.payment_entity import PaymentIntent


class IPaymentGateway(ABC):
    """
    Port to the card payment provider.

    Amounts cross this boundary in the smallest currency unit (cents).
    Provider failures are raised as PaymentGatewayError.
    """

    @property
    @abstractmethod
    def public_key(self) -> str:
        pass

    @abstractmethod
    async def create_payment_intent(
        self, *, amount_cents: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        pass

    @abstractmethod
    async def retrieve_payment_intent(self, *, payment_intent_id: str) -> PaymentIntent:
        pass

    @abstractmethod
    async def confirm_payment_intent(
        self, *, payment_intent_id: str, payment_method_id: Optional[str] = None
    ) -> PaymentIntent:
        pass

    @abstractmethod
    async def refund_payment_intent(self, *, payment_intent_id: str) -> PaymentIntent:
        """Refund a succeeded intent in full; refunding twice is a no-op"""
        pass

    @abstractmethod
    async def charge(
        self,
        *,
        amount_cents: int,
        currency: str,
        payment_method_id: str,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        """Create and confirm an intent in one call (wallet top-ups)"""
        pass

    @abstractmethod
    def construct_webhook_event(self, *, payload: bytes, signature: str) -> dict[str, Any]:
        """Verify the signature and decode the event; PaymentGatewayError(400) when invalid"""
        pass
