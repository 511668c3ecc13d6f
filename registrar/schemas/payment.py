from pydantic import BaseModel, Field, validator
from typing import Literal, Optional
from datetime import datetime
from decimal import Decimal
from uuid import UUID


class PaymentIn(BaseModel):
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    mode: Optional[str] = Field(None, max_length=50)
    reference: Optional[str] = Field(None, max_length=100)

    @validator("mode", "reference", pre=True)
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class PaymentOut(BaseModel):
    id: UUID
    student_id: UUID
    payment_type: Literal["enrollment", "re_enrollment"]
    amount: Decimal
    payment_mode: Optional[str]
    reference: Optional[str]
    status: Literal["pending", "complete", "cancelled"]
    paid_at: datetime
    settled_at: Optional[datetime]

    class Config:
        from_attributes = True
