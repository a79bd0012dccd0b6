from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Text, Numeric, CheckConstraint
from sqlalchemy.sql import func
from lendnudge.core.database import Base
import enum
import uuid


class Currency(str, enum.Enum):
    """Currencies with a known display symbol; other codes render literally"""
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    INR = "INR"


def _new_loan_id() -> str:
    return uuid.uuid4().hex


class Loan(Base):
    """
    Money lent by the owner to a friend.
    Tracks repayment and how many follow-up reminders have been logged.
    """
    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_loans_amount_positive"),
        CheckConstraint("reminder_count >= 0", name="ck_loans_reminder_count_non_negative"),
    )

    id = Column(String(32), primary_key=True, default=_new_loan_id)
    owner_id = Column(String(128), nullable=False, index=True)

    friend_name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, default=Currency.INR.value)
    date_loaned = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)

    # Contact info, only used to build outbound links
    phone_number = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)

    # Repayment is one-way: False -> True
    is_paid = Column(Boolean, default=False, nullable=False)

    # Reminder bookkeeping, written only by "record reminder sent"
    reminder_count = Column(Integer, default=0, nullable=False)
    last_reminder_sent = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Loan(id={self.id}, friend={self.friend_name}, amount={self.amount} {self.currency}, paid={self.is_paid})>"
