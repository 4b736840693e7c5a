from datetime import datetime, timedelta

import pytest

from config import get_settings
from exceptions import NotFoundError
from services.payment import MockPaymentGateway, to_minor_units


def test_to_minor_units():
    assert to_minor_units(499) == 49900
    assert to_minor_units(49.99) == 4999
    assert to_minor_units(49.995) == 5000
    assert to_minor_units(0) == 0


@pytest.mark.asyncio
async def test_create_order_then_get_returns_same_order():
    gateway = MockPaymentGateway(get_settings())
    order = await gateway.create_order(499, notes={"course_id": "c1", "student_id": "s1"})

    assert order.id.startswith("order_")
    assert order.amount == 49900
    assert order.currency == "INR"
    assert order.receipt.startswith("receipt_")

    fetched = await gateway.get_order(order.id)
    assert fetched.amount == order.amount
    assert fetched.currency == order.currency
    assert fetched.notes == {"course_id": "c1", "student_id": "s1"}


@pytest.mark.asyncio
async def test_unknown_order_is_not_found():
    gateway = MockPaymentGateway(get_settings())
    with pytest.raises(NotFoundError):
        await gateway.get_order("order_missing")

    verification = await gateway.verify_payment("order_missing", "pay_1", "sig", "c1", "s1", 499)
    assert verification.success is False


@pytest.mark.asyncio
async def test_verify_accepts_any_signature_in_mock_mode():
    gateway = MockPaymentGateway(get_settings())
    order = await gateway.create_order(499, notes={"course_id": "c1", "student_id": "s1"})

    verification = await gateway.verify_payment(order.id, "pay_1", "whatever", "c1", "s1", 499)
    assert verification.success is True


@pytest.mark.asyncio
async def test_verify_rejects_sentinel_signature():
    gateway = MockPaymentGateway(get_settings())
    order = await gateway.create_order(499, notes={"course_id": "c1", "student_id": "s1"})

    verification = await gateway.verify_payment(order.id, "pay_1", "invalid_signature", "c1", "s1", 499)
    assert verification.success is False
    assert "signature" in verification.reason


@pytest.mark.asyncio
async def test_verify_rejects_course_and_amount_mismatch():
    gateway = MockPaymentGateway(get_settings())
    order = await gateway.create_order(499, notes={"course_id": "c1", "student_id": "s1"})

    wrong_course = await gateway.verify_payment(order.id, "pay_1", "sig", "c2", "s1", 499)
    wrong_amount = await gateway.verify_payment(order.id, "pay_1", "sig", "c1", "s1", 1)
    wrong_student = await gateway.verify_payment(order.id, "pay_1", "sig", "c1", "s2", 499)

    assert wrong_course.success is False
    assert wrong_amount.success is False
    assert wrong_student.success is False
    assert wrong_student.reason == "Order belongs to another account"


@pytest.mark.asyncio
async def test_paid_order_cannot_be_reused():
    gateway = MockPaymentGateway(get_settings())
    order = await gateway.create_order(499, notes={"course_id": "c1", "student_id": "s1"})
    await gateway.mark_paid(order.id)

    verification = await gateway.verify_payment(order.id, "pay_2", "sig", "c1", "s1", 499)
    assert verification.success is False


@pytest.mark.asyncio
async def test_strict_mode_checks_hmac():
    settings = get_settings().model_copy(update={"verify_payment_signatures": True})
    gateway = MockPaymentGateway(settings)
    order = await gateway.create_order(499, notes={"course_id": "c1", "student_id": "s1"})

    bad = await gateway.verify_payment(order.id, "pay_1", "not-a-real-signature", "c1", "s1", 499)
    good = await gateway.verify_payment(order.id, "pay_1", gateway.sign(order.id, "pay_1"), "c1", "s1", 499)

    assert bad.success is False
    assert good.success is True


@pytest.mark.asyncio
async def test_expired_order_is_rejected():
    gateway = MockPaymentGateway(get_settings())
    order = await gateway.create_order(499, notes={"course_id": "c1", "student_id": "s1"})
    order.created_at = datetime.utcnow() - timedelta(hours=2)

    verification = await gateway.verify_payment(order.id, "pay_1", "sig", "c1", "s1", 499)
    assert verification.success is False
