# services/payment.py
"""
Payment gateway seam.

Checkout is two-phase: the client asks for an order, pays against it with
the gateway, then sends back the gateway's (order id, payment id,
signature) triple for verification. ``MockPaymentGateway`` plays the
gateway without contacting anyone; a real client only needs to implement
``PaymentGateway``.
"""
import abc
import hashlib
import hmac
import logging
import time
import uuid
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Dict, Optional

from config import Settings, get_settings
from exceptions import NotFoundError
from models.order import Order, PaymentVerification

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    """499 -> 49900, 49.995 -> 5000."""
    minor = Decimal(str(amount)) * 100
    return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway(abc.ABC):
    @abc.abstractmethod
    async def create_order(self, amount: float, currency: Optional[str] = None,
                           notes: Optional[Dict[str, str]] = None) -> Order:
        ...

    @abc.abstractmethod
    async def get_order(self, order_id: str) -> Order:
        ...

    @abc.abstractmethod
    async def verify_payment(self, order_id: str, payment_id: str, signature: str,
                             course_id: str, student_id: str, amount: float) -> PaymentVerification:
        ...

    @abc.abstractmethod
    async def mark_paid(self, order_id: str) -> None:
        ...


class MockPaymentGateway(PaymentGateway):
    """In-process stand-in for a card gateway. Orders live in memory only."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._orders: Dict[str, Order] = {}

    @property
    def key_id(self) -> str:
        return self.settings.payment_key_id

    def sign(self, order_id: str, payment_id: str) -> str:
        body = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self.settings.payment_key_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

    def _is_expired(self, order: Order) -> bool:
        ttl = timedelta(minutes=self.settings.order_ttl_minutes)
        return datetime.utcnow() - order.created_at > ttl

    def _purge_expired(self) -> None:
        for order_id in [oid for oid, order in self._orders.items() if self._is_expired(order)]:
            del self._orders[order_id]

    async def create_order(self, amount: float, currency: Optional[str] = None,
                           notes: Optional[Dict[str, str]] = None) -> Order:
        self._purge_expired()
        order = Order(
            id=f"order_{uuid.uuid4().hex[:14]}",
            amount=to_minor_units(amount),
            currency=currency or self.settings.payment_currency,
            receipt=f"receipt_{int(time.time() * 1000)}",
            notes={key: str(value) for key, value in (notes or {}).items()},
        )
        self._orders[order.id] = order
        logger.info("Mock order created", extra={"order_id": order.id})
        return order

    async def get_order(self, order_id: str) -> Order:
        order = self._orders.get(order_id)
        if order is None or self._is_expired(order):
            self._orders.pop(order_id, None)
            raise NotFoundError("Order not found")
        return order

    async def verify_payment(self, order_id: str, payment_id: str, signature: str,
                             course_id: str, student_id: str, amount: float) -> PaymentVerification:
        order = self._orders.get(order_id)
        if order is None or self._is_expired(order):
            return PaymentVerification(success=False, reason="Unknown or expired order")
        if order.status != "created":
            return PaymentVerification(success=False, reason="Order already paid")
        if signature == self.settings.invalid_signature_sentinel:
            return PaymentVerification(success=False, reason="Invalid payment signature")
        if self.settings.verify_payment_signatures and not hmac.compare_digest(
            self.sign(order_id, payment_id), signature
        ):
            return PaymentVerification(success=False, reason="Invalid payment signature")
        if order.notes.get("course_id") != str(course_id):
            return PaymentVerification(success=False, reason="Order does not belong to this course")
        if order.notes.get("student_id") != str(student_id):
            return PaymentVerification(success=False, reason="Order belongs to another account")
        if order.amount != to_minor_units(amount):
            return PaymentVerification(success=False, reason="Amount does not match order")
        return PaymentVerification(success=True, reason="Payment verified (mock)")

    async def mark_paid(self, order_id: str) -> None:
        order = self._orders.get(order_id)
        if order is not None:
            order.status = "paid"


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    return MockPaymentGateway()
