from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Dict
from datetime import datetime
from decimal import Decimal
import logging

from lendnudge.core.clock import as_utc
from lendnudge.core.config import settings
from lendnudge.core.exceptions import (
    LoanValidationError, LoanNotFound, ReminderNotAllowed, StoreUnavailable
)
from lendnudge.core.security import mask_email, mask_phone
from lendnudge.modules.loans.models import Loan
from lendnudge.modules.loans.schemas import LoanCreate, LoanSummary
from lendnudge.modules.reminders.eligibility import (
    ReminderPolicy, DEFAULT_POLICY, is_reminder_due
)

logger = logging.getLogger(__name__)


class LoanService:
    """
    Owner-scoped persistence for loans.
    Every failure of the underlying database surfaces as StoreUnavailable.
    """

    @staticmethod
    def validate_loan_data(data: LoanCreate, now: datetime) -> None:
        """
        Checks that depend on the clock; field constraints live on LoanCreate.
        Runs before anything reaches the database.
        """
        if data.date_loaned > as_utc(now).date():
            raise LoanValidationError(
                "Invalid loan data",
                {"date_loaned": "Loan date cannot be in the future"}
            )

    @staticmethod
    async def create_loan(db: AsyncSession, owner_id: str, data: LoanCreate, now: datetime) -> Loan:
        """Record a new unpaid loan with no reminders"""
        LoanService.validate_loan_data(data, now)

        timestamp = as_utc(now)
        loan = Loan(
            owner_id=owner_id,
            friend_name=data.friend_name.strip(),
            amount=data.amount,
            currency=data.currency,
            date_loaned=data.date_loaned,
            reason=data.reason,
            phone_number=data.phone_number,
            email=data.email,
            is_paid=False,
            reminder_count=0,
            created_at=timestamp,
            updated_at=timestamp
        )
        try:
            db.add(loan)
            await db.commit()
            await db.refresh(loan)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to create loan for owner {owner_id}: {str(e)}")
            raise StoreUnavailable("Could not save loan") from e

        contact = ", ".join(
            c for c in (
                mask_phone(loan.phone_number) if loan.phone_number else None,
                mask_email(loan.email) if loan.email else None
            ) if c
        ) or "no contact"
        logger.info(f"Loan {loan.id} created for owner {owner_id} ({contact})")
        return loan

    @staticmethod
    async def list_loans(db: AsyncSession, owner_id: str) -> List[Loan]:
        """All loans of an owner, most recently loaned first"""
        query = (
            select(Loan)
            .where(Loan.owner_id == owner_id)
            .order_by(Loan.date_loaned.desc(), Loan.created_at.desc())
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to list loans for owner {owner_id}: {str(e)}")
            raise StoreUnavailable("Could not load loans") from e
        return list(result.scalars().all())

    @staticmethod
    async def get_loan(db: AsyncSession, owner_id: str, loan_id: str) -> Loan:
        """Get a loan owned by ``owner_id``"""
        query = select(Loan).where(and_(Loan.id == loan_id, Loan.owner_id == owner_id))
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load loan {loan_id}: {str(e)}")
            raise StoreUnavailable("Could not load loan") from e

        loan = result.scalar_one_or_none()
        if loan is None:
            raise LoanNotFound(loan_id)
        return loan

    @staticmethod
    async def mark_paid(db: AsyncSession, owner_id: str, loan_id: str, now: datetime) -> Loan:
        """Mark a loan repaid; a paid loan stays paid"""
        loan = await LoanService.get_loan(db, owner_id, loan_id)
        if loan.is_paid:
            return loan

        loan.is_paid = True
        loan.updated_at = as_utc(now)
        try:
            await db.commit()
            await db.refresh(loan)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to mark loan {loan_id} as paid: {str(e)}")
            raise StoreUnavailable("Could not update loan") from e

        logger.info(f"Loan {loan_id} marked as paid")
        return loan

    @staticmethod
    async def record_reminder_sent(
        db: AsyncSession,
        owner_id: str,
        loan_id: str,
        now: datetime,
        policy: ReminderPolicy = DEFAULT_POLICY
    ) -> Loan:
        """
        Log that a reminder went out.

        The count is incremented inside a single UPDATE guarded on the loan
        being unpaid and under the reminder cap, so two concurrent sends can
        neither lose an increment nor push the count past the cap.
        """
        timestamp = as_utc(now)
        stmt = (
            update(Loan)
            .where(
                and_(
                    Loan.id == loan_id,
                    Loan.owner_id == owner_id,
                    Loan.is_paid == False,
                    Loan.reminder_count < policy.max_reminders
                )
            )
            .values(
                reminder_count=Loan.reminder_count + 1,
                last_reminder_sent=timestamp,
                updated_at=timestamp
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await db.execute(stmt)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to record reminder for loan {loan_id}: {str(e)}")
            raise StoreUnavailable("Could not record reminder") from e

        loan = await LoanService.get_loan(db, owner_id, loan_id)
        await db.refresh(loan)
        if result.rowcount == 0:
            reason = "Loan is already paid" if loan.is_paid else "Maximum number of reminders already sent"
            logger.warning(f"Reminder for loan {loan_id} rejected: {reason}")
            raise ReminderNotAllowed(reason, {"loan_id": loan_id, "reminder_count": loan.reminder_count})

        logger.info(f"Reminder #{loan.reminder_count} recorded for loan {loan_id}")
        return loan

    @staticmethod
    async def delete_loan(db: AsyncSession, owner_id: str, loan_id: str) -> None:
        """Hard delete a loan"""
        loan = await LoanService.get_loan(db, owner_id, loan_id)
        try:
            await db.delete(loan)
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Failed to delete loan {loan_id}: {str(e)}")
            raise StoreUnavailable("Could not delete loan") from e

        logger.info(f"Loan {loan_id} deleted")

    @staticmethod
    async def get_summary(
        db: AsyncSession,
        owner_id: str,
        now: datetime,
        policy: ReminderPolicy = DEFAULT_POLICY
    ) -> LoanSummary:
        """Totals shown on the dashboard header"""
        loans = await LoanService.list_loans(db, owner_id)
        active = [loan for loan in loans if not loan.is_paid]

        outstanding: Dict[str, Decimal] = {}
        for loan in active:
            outstanding[loan.currency] = outstanding.get(loan.currency, Decimal("0")) + Decimal(loan.amount)

        # list_loans returns newest first
        primary_currency = active[0].currency if active else settings.DEFAULT_CURRENCY

        return LoanSummary(
            active_loans=len(active),
            paid_loans=len(loans) - len(active),
            due_for_reminder=sum(1 for loan in active if is_reminder_due(loan, now, policy)),
            outstanding_by_currency=outstanding,
            primary_currency=primary_currency,
            primary_outstanding=outstanding.get(primary_currency, Decimal("0"))
        )
