"""
In-process payment gateway

Behaves like a card processor's intent API closely enough for local development
and tests: intents start in `requires_payment_method`, confirming with a test
card moves them to `succeeded` (or `failed` for the decline card), and webhook
payloads are signed `t=<unix ts>,v1=<hex hmac-sha256 of "<ts>.<payload>">`.
"""

import hashlib
import hmac
import time
from typing import Any, Dict, Optional

import anyio
import attrs
import orjson
import uuid_utils
from pydantic import SecretStr

from src.platform.exception.exceptions import PaymentGatewayError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_payment_gateway import IPaymentGateway
from src.service.marketplace.domain.entity.payment_entity import IntentStatus, PaymentIntent


DEFAULT_TEST_CARD = 'pm_card_visa'
DECLINED_TEST_CARD = 'pm_card_chargeDeclined'
WEBHOOK_TOLERANCE_SECONDS = 300


def sign_webhook_payload(payload: bytes, secret: str, timestamp: Optional[int] = None) -> str:
    """Build the signature header a webhook sender attaches to `payload`"""
    ts = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(
        secret.encode('utf-8'), f'{ts}.'.encode('utf-8') + payload, hashlib.sha256
    ).hexdigest()
    return f't={ts},v1={digest}'


class MockPaymentGateway(IPaymentGateway):
    def __init__(self, *, public_key: str, webhook_secret: SecretStr) -> None:
        self._public_key = public_key
        self._webhook_secret = webhook_secret
        self._intents: Dict[str, PaymentIntent] = {}
        self._lock = anyio.Lock()

    @property
    def public_key(self) -> str:
        return self._public_key

    @Logger.io
    async def create_payment_intent(
        self, *, amount_cents: int, currency: str, metadata: dict[str, str]
    ) -> PaymentIntent:
        if amount_cents <= 0:
            raise PaymentGatewayError('Amount must be a positive integer', status_code=400)

        intent_id = f'pi_mock_{uuid_utils.uuid7().hex}'
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f'{intent_id}_secret_mock',
            amount_cents=amount_cents,
            currency=currency.lower(),
            status=IntentStatus.REQUIRES_PAYMENT_METHOD,
            metadata=dict(metadata),
        )
        async with self._lock:
            self._intents[intent_id] = intent
        return intent

    @Logger.io
    async def retrieve_payment_intent(self, *, payment_intent_id: str) -> PaymentIntent:
        async with self._lock:
            return self._get(payment_intent_id)

    @Logger.io
    async def confirm_payment_intent(
        self, *, payment_intent_id: str, payment_method_id: Optional[str] = None
    ) -> PaymentIntent:
        async with self._lock:
            intent = self._get(payment_intent_id)
            if intent.status == IntentStatus.SUCCEEDED:
                return intent
            if intent.status == IntentStatus.CANCELED:
                raise PaymentGatewayError(
                    'This PaymentIntent has been canceled', status_code=400
                )

            if (payment_method_id or DEFAULT_TEST_CARD) == DECLINED_TEST_CARD:
                intent = attrs.evolve(
                    intent, status=IntentStatus.FAILED, last_error='Your card was declined.'
                )
            else:
                intent = attrs.evolve(intent, status=IntentStatus.SUCCEEDED, last_error=None)
            self._intents[payment_intent_id] = intent

        Logger.base.info(f'💳 [GATEWAY] Intent {payment_intent_id} -> {intent.status}')
        return intent

    @Logger.io
    async def refund_payment_intent(self, *, payment_intent_id: str) -> PaymentIntent:
        async with self._lock:
            intent = self._get(payment_intent_id)
            if not intent.succeeded:
                raise PaymentGatewayError(
                    f'PaymentIntent {payment_intent_id} has no successful charge to refund',
                    status_code=400,
                )
            if not intent.refunded:
                intent = attrs.evolve(intent, amount_refunded_cents=intent.amount_cents)
                self._intents[payment_intent_id] = intent

        Logger.base.info(f'↩️ [GATEWAY] Intent {payment_intent_id} refunded')
        return intent

    @Logger.io
    async def charge(
        self,
        *,
        amount_cents: int,
        currency: str,
        payment_method_id: str,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        intent = await self.create_payment_intent(
            amount_cents=amount_cents, currency=currency, metadata=metadata
        )
        return await self.confirm_payment_intent(
            payment_intent_id=intent.id, payment_method_id=payment_method_id
        )

    def construct_webhook_event(self, *, payload: bytes, signature: str) -> dict[str, Any]:
        parts = dict(
            item.split('=', 1) for item in signature.split(',') if '=' in item
        )
        timestamp, received = parts.get('t'), parts.get('v1')
        if not timestamp or not received or not timestamp.isdigit():
            raise PaymentGatewayError('Invalid webhook signature', status_code=400)
        if abs(time.time() - int(timestamp)) > WEBHOOK_TOLERANCE_SECONDS:
            raise PaymentGatewayError('Webhook timestamp outside tolerance', status_code=400)

        expected = sign_webhook_payload(
            payload, self._webhook_secret.get_secret_value(), int(timestamp)
        ).split('v1=', 1)[1]
        if not hmac.compare_digest(expected, received):
            raise PaymentGatewayError('Invalid webhook signature', status_code=400)

        try:
            event = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise PaymentGatewayError('Invalid webhook payload', status_code=400) from e
        if not isinstance(event, dict):
            raise PaymentGatewayError('Invalid webhook payload', status_code=400)
        return event

    def _get(self, payment_intent_id: str) -> PaymentIntent:
        intent = self._intents.get(payment_intent_id)
        if intent is None:
            raise PaymentGatewayError(
                f'No such payment_intent: {payment_intent_id}', status_code=404
            )
        return intent
