from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from typing import List

from lendnudge.core.clock import Clock
from lendnudge.core.config import settings
from lendnudge.core.database import get_db
from lendnudge.core.dependencies import get_current_owner_id, get_clock, get_reminder_policy
from lendnudge.modules.loans import schemas
from lendnudge.modules.loans.demo import seed_demo_loans
from lendnudge.modules.loans.models import Loan
from lendnudge.modules.loans.services import LoanService
from lendnudge.modules.reminders.eligibility import ReminderPolicy, evaluate

router = APIRouter(prefix="/api/v1/loans", tags=["loans"])


def loan_with_status(loan: Loan, now: datetime, policy: ReminderPolicy) -> schemas.LoanWithStatusResponse:
    """Attach the reminder status evaluated at ``now``"""
    result = evaluate(loan, now, policy)
    return schemas.LoanWithStatusResponse(
        loan=schemas.LoanResponse.model_validate(loan),
        reminder=schemas.ReminderStatusResponse(
            state=result.state.value,
            label=result.label,
            is_due=result.is_due,
            days_since_loan=result.days_since_loan,
            days_remaining=result.days_remaining,
            reminders_left=result.reminders_left,
            reminder_count=loan.reminder_count,
            last_reminder_sent=loan.last_reminder_sent
        )
    )


@router.post("", response_model=schemas.LoanWithStatusResponse, status_code=status.HTTP_201_CREATED)
async def create_loan(
    data: schemas.LoanCreate,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """
    Record money lent to a friend.

    - Amount must be positive
    - Loan date cannot be in the future
    """
    now = clock()
    loan = await LoanService.create_loan(db, owner_id, data, now)
    return loan_with_status(loan, now, policy)


@router.get("", response_model=schemas.LoanListResponse)
async def list_loans(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """List the caller's loans with their reminder status, newest first"""
    now = clock()
    loans = await LoanService.list_loans(db, owner_id)
    return schemas.LoanListResponse(
        loans=[loan_with_status(loan, now, policy) for loan in loans],
        total=len(loans)
    )


@router.get("/summary", response_model=schemas.LoanSummary)
async def get_summary(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """Active/paid counts and the total still owed"""
    return await LoanService.get_summary(db, owner_id, clock(), policy)


@router.post("/demo", response_model=List[schemas.LoanWithStatusResponse], status_code=status.HTTP_201_CREATED)
async def seed_demo(
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """Seed demo loans (development only)"""
    if not settings.DEBUG:
        raise HTTPException(status_code=404, detail="Not Found")
    now = clock()
    loans = await seed_demo_loans(db, owner_id, now)
    return [loan_with_status(loan, now, policy) for loan in loans]


@router.get("/{loan_id}", response_model=schemas.LoanWithStatusResponse)
async def get_loan(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """Get a single loan"""
    loan = await LoanService.get_loan(db, owner_id, loan_id)
    return loan_with_status(loan, clock(), policy)


@router.post("/{loan_id}/paid", response_model=schemas.LoanWithStatusResponse)
async def mark_paid(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """Mark a loan as repaid. There is no way back."""
    now = clock()
    loan = await LoanService.mark_paid(db, owner_id, loan_id, now)
    return loan_with_status(loan, now, policy)


@router.delete("/{loan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_loan(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Delete a loan permanently"""
    await LoanService.delete_loan(db, owner_id, loan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
