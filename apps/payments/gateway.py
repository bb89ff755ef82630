"""
Payment gateway client.

  RazorpayGateway : real orders through the razorpay SDK
  StubGateway     : predictable local orders, no network (dev + tests)
  get_gateway()   : build whichever one settings ask for

The engine receives a gateway as a parameter; nothing here is a
module-level client.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import uuid4

from django.conf import settings

logger = logging.getLogger(__name__)


@dataclass
class GatewayOrder:
    """The subset of a gateway order the booking flow hands back to the client."""
    id: str
    amount: int          # minor units (paise)
    currency: str
    receipt: str


def to_minor_units(amount) -> int:
    """Rupees → paise. Razorpay only accepts the smallest currency unit."""
    return int((Decimal(amount) * 100).quantize(Decimal('1')))


def _digest_matches(computed: str, signature) -> bool:
    # compare_digest raises on non-ASCII str; callers may pass anything from a request body
    if not isinstance(signature, str):
        return False
    return hmac.compare_digest(computed.encode(), signature.encode(errors='replace'))


def verify_payment_signature(secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    """Checkout signature: HMAC-SHA256 over 'order_id|payment_id', hex digest."""
    if not (secret and order_id and payment_id and signature):
        return False
    message = f"{order_id}|{payment_id}".encode()
    computed = hmac.new(key=secret.encode(), msg=message, digestmod=hashlib.sha256).hexdigest()
    return _digest_matches(computed, signature)


def verify_webhook_signature(secret: str, raw_body: bytes, signature: str) -> bool:
    """Webhook signature: HMAC-SHA256 over the raw request body."""
    if not (secret and signature):
        return False
    computed = hmac.new(key=secret.encode(), msg=raw_body, digestmod=hashlib.sha256).hexdigest()
    return _digest_matches(computed, signature)


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, client=None):
        self.key_id = key_id
        self.key_secret = key_secret
        if client is None:
            import razorpay

            client = razorpay.Client(auth=(key_id, key_secret))
        self._client = client

    def create_order(self, amount_minor_units: int, currency: str, receipt: str) -> GatewayOrder:
        order_data = self._client.order.create({
            'amount': amount_minor_units,
            'currency': currency,
            'receipt': receipt[:40],
        })
        logger.info('Razorpay order %s created for receipt %s', order_data['id'], receipt)
        return GatewayOrder(
            id=order_data['id'],
            amount=order_data['amount'],
            currency=order_data['currency'],
            receipt=order_data.get('receipt', receipt),
        )

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return verify_payment_signature(self.key_secret, order_id, payment_id, signature)


class StubGateway:
    """
    Stand-in for Razorpay when no live keys are configured.
    Orders get 'order_stub_' ids; signatures are still real HMACs over the
    configured secret, so the verification path is exercised unchanged.
    """

    def __init__(self, key_id: str = 'rzp_stub', key_secret: str = 'stub_secret'):
        self.key_id = key_id
        self.key_secret = key_secret

    def create_order(self, amount_minor_units: int, currency: str, receipt: str) -> GatewayOrder:
        return GatewayOrder(
            id=f"order_stub_{uuid4().hex[:14]}",
            amount=amount_minor_units,
            currency=currency,
            receipt=receipt[:40],
        )

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return verify_payment_signature(self.key_secret, order_id, payment_id, signature)

    def sign(self, order_id: str, payment_id: str) -> str:
        """What the checkout would send back for a successful payment."""
        message = f"{order_id}|{payment_id}".encode()
        return hmac.new(self.key_secret.encode(), message, hashlib.sha256).hexdigest()


def _should_use_stub() -> bool:
    if getattr(settings, 'RAZORPAY_USE_STUB', False):
        return True
    return not (settings.RAZORPAY_KEY_ID and settings.RAZORPAY_KEY_SECRET)


def get_gateway():
    """Gateway for the current settings."""
    if _should_use_stub():
        return StubGateway(
            key_id=settings.RAZORPAY_KEY_ID or 'rzp_stub',
            key_secret=settings.RAZORPAY_KEY_SECRET or 'stub_secret',
        )
    return RazorpayGateway(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET)
