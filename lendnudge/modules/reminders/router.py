from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging
import random

from lendnudge.core.clock import Clock
from lendnudge.core.database import get_db
from lendnudge.core.dependencies import (
    get_current_owner_id, get_clock, get_rng, get_reminder_policy
)
from lendnudge.modules.loans.router import loan_with_status
from lendnudge.modules.loans.schemas import ReminderStatusResponse
from lendnudge.modules.loans.services import LoanService
from lendnudge.modules.reminders import schemas
from lendnudge.modules.reminders.composer import (
    ReminderTone, templates_for_tone, select_template, render_template,
    compose_email_template, build_outbound_links
)
from lendnudge.modules.reminders.eligibility import ReminderPolicy, evaluate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reminders", tags=["reminders"])


def _template_response(template) -> schemas.ReminderTemplateResponse:
    return schemas.ReminderTemplateResponse(id=template.id, tone=template.tone, message=template.message)


@router.get("/templates", response_model=schemas.ReminderTemplateListResponse)
async def list_templates(
    tone: Optional[str] = Query(None, description="Filter by tone"),
    owner_id: str = Depends(get_current_owner_id)
):
    """Available reminder templates"""
    tone_filter = None
    if tone:
        try:
            tone_filter = ReminderTone(tone)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid tone: {tone}"
            )

    return schemas.ReminderTemplateListResponse(
        templates=[_template_response(t) for t in templates_for_tone(tone_filter)]
    )


@router.get("/{loan_id}/status", response_model=ReminderStatusResponse)
async def get_reminder_status(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """Whether a reminder can go out now, and if not, why"""
    loan = await LoanService.get_loan(db, owner_id, loan_id)
    return loan_with_status(loan, clock(), policy).reminder


@router.post("/{loan_id}/compose", response_model=schemas.ComposeResponse)
async def compose_reminder(
    loan_id: str,
    request: schemas.ComposeRequest,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    rng: random.Random = Depends(get_rng)
):
    """
    Compose a reminder message.

    - Pass a template id to pick a tone, omit it for a random one
    - Returns ready-made WhatsApp, SMS and e-mail links for the message
    """
    loan = await LoanService.get_loan(db, owner_id, loan_id)
    template = select_template(request.template_id, rng)
    message = render_template(template, loan, request.with_currency_symbol)
    email_template = compose_email_template(loan)

    return schemas.ComposeResponse(
        loan_id=loan.id,
        template=_template_response(template),
        message=message,
        email_template=schemas.EmailTemplateResponse(subject=email_template.subject, body=email_template.body),
        links=build_outbound_links(loan, message)
    )


@router.get("/{loan_id}/email-template", response_model=schemas.EmailTemplateResponse)
async def get_email_template(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """E-mail subject and body for sending by hand"""
    loan = await LoanService.get_loan(db, owner_id, loan_id)
    email_template = compose_email_template(loan)
    return schemas.EmailTemplateResponse(subject=email_template.subject, body=email_template.body)


@router.post("/{loan_id}/links", response_model=schemas.LinksResponse)
async def get_outbound_links(
    loan_id: str,
    request: schemas.LinksRequest,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id)
):
    """Deep links for a message the user edited themselves"""
    loan = await LoanService.get_loan(db, owner_id, loan_id)
    message = request.message or compose_email_template(loan).body
    return schemas.LinksResponse(loan_id=loan.id, message=message, links=build_outbound_links(loan, message))


@router.post("/{loan_id}/sent", response_model=schemas.ReminderSentResponse)
async def mark_reminder_sent(
    loan_id: str,
    db: AsyncSession = Depends(get_db),
    owner_id: str = Depends(get_current_owner_id),
    clock: Clock = Depends(get_clock),
    policy: ReminderPolicy = Depends(get_reminder_policy)
):
    """
    Log that the user sent a reminder.

    - Only allowed while the loan is due for a reminder
    - Nothing is delivered by the server
    """
    now = clock()
    loan = await LoanService.get_loan(db, owner_id, loan_id)
    current = evaluate(loan, now, policy)
    if not current.is_due:
        logger.warning(f"Reminder for loan {loan_id} refused: {current.label}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Reminder not allowed: {current.label}"
        )

    loan = await LoanService.record_reminder_sent(db, owner_id, loan_id, now, policy)
    updated = loan_with_status(loan, now, policy)
    return schemas.ReminderSentResponse(loan=updated.loan, reminder=updated.reminder)
