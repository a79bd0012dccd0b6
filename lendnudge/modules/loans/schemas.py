from pydantic import BaseModel, EmailStr, Field, validator
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List, Dict
import re

from lendnudge.core.config import settings

_PHONE_PATTERN = re.compile(r"^[0-9+\-\s().]+$")


# ============ Loan Schemas ============

class LoanCreate(BaseModel):
    """Schema for recording a new loan"""
    friend_name: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: str = Field(settings.DEFAULT_CURRENCY, min_length=3, max_length=3)
    date_loaned: date
    reason: Optional[str] = Field(None, max_length=500)
    phone_number: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None

    @validator('reason', 'phone_number', 'email', pre=True)
    def blank_to_none(cls, v):
        """Treat empty or whitespace-only optional fields as absent"""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @validator('friend_name')
    def validate_friend_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Friend name is required')
        return v

    @validator('currency')
    def validate_currency(cls, v):
        v = v.strip().upper()
        if not v.isalpha():
            raise ValueError('Currency must be a three-letter code')
        return v

    @validator('phone_number')
    def validate_phone_number(cls, v):
        if v is None:
            return v
        if not _PHONE_PATTERN.match(v) or not any(ch.isdigit() for ch in v):
            raise ValueError('Phone number may only contain digits, spaces and + - . ( )')
        return v


class LoanResponse(BaseModel):
    """Response schema for a loan"""
    id: str
    owner_id: str
    friend_name: str
    amount: Decimal
    currency: str
    date_loaned: date
    reason: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    is_paid: bool
    reminder_count: int
    last_reminder_sent: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ReminderStatusResponse(BaseModel):
    """Reminder eligibility of a loan at request time"""
    state: str
    label: str
    is_due: bool
    days_since_loan: int
    days_remaining: Optional[int] = None
    reminders_left: int
    reminder_count: int
    last_reminder_sent: Optional[datetime] = None


class LoanWithStatusResponse(BaseModel):
    loan: LoanResponse
    reminder: ReminderStatusResponse


class LoanListResponse(BaseModel):
    loans: List[LoanWithStatusResponse]
    total: int


# ============ Summary Schemas ============

class LoanSummary(BaseModel):
    """Dashboard totals for the owner's loans"""
    active_loans: int
    paid_loans: int
    due_for_reminder: int
    outstanding_by_currency: Dict[str, Decimal]
    primary_currency: str
    primary_outstanding: Decimal
