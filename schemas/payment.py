# schemas/payment.py
from typing import Optional

from pydantic import BaseModel, Field

from schemas.enrollment import EnrollmentOut


class CreateOrderRequest(BaseModel):
    course_id: str
    amount: Optional[float] = Field(None, ge=0)


class CreateOrderResponse(BaseModel):
    success: bool = True
    order_id: str
    amount: int
    currency: str
    key_id: str


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    course_id: str
    amount: float = Field(..., ge=0)


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    message: str
    enrollment: EnrollmentOut
