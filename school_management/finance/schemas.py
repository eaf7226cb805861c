from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from ..common.schemas import CamelModel
from ..core.constants import MIN_WAGE_YEAR
from ..core.enums import PaymentStatus


class WageCalculate(CamelModel):
    teacher_id: Optional[int] = None
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=MIN_WAGE_YEAR)


class WageUpdate(CamelModel):
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_date: Optional[datetime] = None
    status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class PaymentCreate(CamelModel):
    school_id: int
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=MIN_WAGE_YEAR)
    agreed_amount: Decimal = Field(ge=0)
    notes: Optional[str] = None


class PaymentUpdate(CamelModel):
    agreed_amount: Optional[Decimal] = Field(default=None, ge=0)
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_date: Optional[datetime] = None
    status: Optional[PaymentStatus] = None
    notes: Optional[str] = None
