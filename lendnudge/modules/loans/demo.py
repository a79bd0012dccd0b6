"""Demo loans for local development."""
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List
import logging

from lendnudge.core.clock import as_utc
from lendnudge.core.exceptions import StoreUnavailable
from lendnudge.modules.loans.models import Loan
from lendnudge.modules.loans.schemas import LoanCreate
from lendnudge.modules.loans.services import LoanService

logger = logging.getLogger(__name__)

# (friend, amount, currency, days ago, reason)
DEMO_LOANS = [
    ("Alex Chen", Decimal("50"), "USD", 7, "Concert tickets"),
    ("Sarah Miller", Decimal("125"), "USD", 12, "Dinner and drinks"),
    ("Mike Johnson", Decimal("200"), "USD", 20, "Emergency car repair"),
    ("Emily Davis", Decimal("75"), "USD", 4, "Birthday gift for mutual friend"),
    ("Chris Lee", Decimal("300"), "USD", 30, "First month rent"),
]


def build_demo_loans(now: datetime) -> List[LoanCreate]:
    today = as_utc(now).date()
    return [
        LoanCreate(
            friend_name=name,
            amount=amount,
            currency=currency,
            date_loaned=today - timedelta(days=days_ago),
            reason=reason
        )
        for name, amount, currency, days_ago, reason in DEMO_LOANS
    ]


async def seed_demo_loans(db: AsyncSession, owner_id: str, now: datetime) -> List[Loan]:
    """Create the demo loans for ``owner_id``; a failed loan is logged and skipped"""
    logger.info(f"Seeding demo loans for owner {owner_id}")

    created = []
    for data in build_demo_loans(now):
        try:
            created.append(await LoanService.create_loan(db, owner_id, data, now))
        except StoreUnavailable as e:
            logger.error(f"Failed to add demo loan for {data.friend_name}: {e}")

    logger.info(f"Seeded {len(created)} of {len(DEMO_LOANS)} demo loans")
    return created
