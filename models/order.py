# models/order.py
from datetime import datetime
from typing import Dict

from pydantic import BaseModel, Field


class Order(BaseModel):
    id: str
    amount: int  # minor units (paise/cents)
    currency: str
    receipt: str
    notes: Dict[str, str] = {}
    status: str = "created"
    created_at: datetime = Field(default_factory=datetime.utcnow)


class PaymentVerification(BaseModel):
    success: bool
    reason: str = ""
