# routers/payments.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends

from dependencies import get_current_user, get_enrollment_service
from models.order import Order
from models.user import User
from schemas.common import DataResponse
from schemas.enrollment import EnrollmentOut, PaymentConfirmation
from schemas.payment import (
    CreateOrderRequest, CreateOrderResponse, VerifyPaymentRequest, VerifyPaymentResponse,
)
from services.enrollment import EnrollmentService
from services.notification import EmailService, get_email_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-order", response_model=CreateOrderResponse)
async def create_order(
    order_request: CreateOrderRequest,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    order = await service.create_order(current_user, order_request.course_id, order_request.amount)
    return CreateOrderResponse(
        order_id=order.id,
        amount=order.amount,
        currency=order.currency,
        key_id=service.gateway.key_id,
    )


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    verification: VerifyPaymentRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
    email_service: EmailService = Depends(get_email_service),
):
    """Second checkout phase: verify the gateway's confirmation, then enroll."""
    confirmation = PaymentConfirmation(
        order_id=verification.razorpay_order_id,
        payment_id=verification.razorpay_payment_id,
        signature=verification.razorpay_signature,
    )
    enrollment = await service.enroll(current_user, verification.course_id, verification.amount, confirmation)
    if enrollment.course:
        background_tasks.add_task(
            email_service.send_enrollment_confirmation,
            current_user.email, current_user.full_name, enrollment.course.title,
        )
    return VerifyPaymentResponse(message="Payment verified and enrollment created", enrollment=enrollment)


@router.get("/order/{order_id}", response_model=DataResponse[Order])
async def get_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    return DataResponse(data=await service.get_order(current_user, order_id))


@router.get("/history", response_model=DataResponse[List[EnrollmentOut]])
async def get_payment_history(
    current_user: User = Depends(get_current_user),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    return DataResponse(data=await service.payment_history(current_user))
