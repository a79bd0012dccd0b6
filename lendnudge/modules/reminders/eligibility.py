"""Reminder eligibility rules.

Decides whether a follow-up may be sent for a loan at a given moment and
produces the status label shown next to it. All functions are pure: the
caller passes ``now`` and, optionally, a :class:`ReminderPolicy`.

Checks run in a fixed order: paid, reminder cap, grace period after the
loan, first reminder, cooldown since the previous reminder.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional
import enum

from lendnudge.core.clock import as_utc


@dataclass(frozen=True)
class ReminderPolicy:
    """Tunable reminder limits"""
    grace_days: int = 3
    cooldown_days: int = 2
    max_reminders: int = 3

    @classmethod
    def from_settings(cls, settings) -> "ReminderPolicy":
        return cls(
            grace_days=settings.REMINDER_GRACE_DAYS,
            cooldown_days=settings.REMINDER_COOLDOWN_DAYS,
            max_reminders=settings.MAX_REMINDERS,
        )


DEFAULT_POLICY = ReminderPolicy()


class ReminderState(str, enum.Enum):
    """Where a loan sits in the reminder cycle"""
    PAID = "paid"
    READY = "ready"
    MAX_REMINDERS = "max_reminders"
    GRACE_PERIOD = "grace_period"
    COOLDOWN = "cooldown"
    PENDING = "pending"


@dataclass(frozen=True)
class ReminderStatus:
    state: ReminderState
    label: str
    is_due: bool
    days_since_loan: int
    days_remaining: Optional[int] = None
    reminders_left: int = 0


def _calendar_date(value) -> date:
    if isinstance(value, datetime):
        return as_utc(value).date()
    return value


def _day_word(n: int) -> str:
    return "day" if n == 1 else "days"


def days_since_loan(loan, now: datetime) -> int:
    """Whole calendar days between the loan date and ``now``"""
    return (_calendar_date(now) - _calendar_date(loan.date_loaned)).days


def days_since_last_reminder(loan, now: datetime) -> Optional[int]:
    """Whole days since the last logged reminder, or None if none was sent"""
    if loan.last_reminder_sent is None:
        return None
    return (as_utc(now) - as_utc(loan.last_reminder_sent)).days


def is_reminder_due(loan, now: datetime, policy: ReminderPolicy = DEFAULT_POLICY) -> bool:
    """True when a reminder may be sent for ``loan`` at ``now``"""
    if loan.is_paid:
        return False

    if loan.reminder_count >= policy.max_reminders:
        return False

    if days_since_loan(loan, now) < policy.grace_days:
        return False

    since_reminder = days_since_last_reminder(loan, now)
    if since_reminder is None:
        return True

    return since_reminder >= policy.cooldown_days


def evaluate(loan, now: datetime, policy: ReminderPolicy = DEFAULT_POLICY) -> ReminderStatus:
    """Full reminder status for display and API responses"""
    elapsed = days_since_loan(loan, now)
    reminders_left = max(policy.max_reminders - loan.reminder_count, 0)

    if loan.is_paid:
        return ReminderStatus(ReminderState.PAID, "Paid", False, elapsed)

    if is_reminder_due(loan, now, policy):
        return ReminderStatus(
            ReminderState.READY, "Ready to send", True, elapsed,
            reminders_left=reminders_left
        )

    if loan.reminder_count >= policy.max_reminders:
        return ReminderStatus(ReminderState.MAX_REMINDERS, "Max reminders sent", False, elapsed)

    if elapsed < policy.grace_days:
        remaining = policy.grace_days - elapsed
        return ReminderStatus(
            ReminderState.GRACE_PERIOD, f"Wait {remaining} more {_day_word(remaining)}",
            False, elapsed, days_remaining=remaining, reminders_left=reminders_left
        )

    since_reminder = days_since_last_reminder(loan, now)
    if since_reminder is not None and since_reminder < policy.cooldown_days:
        remaining = policy.cooldown_days - since_reminder
        return ReminderStatus(
            ReminderState.COOLDOWN, f"Next reminder in {remaining} {_day_word(remaining)}",
            False, elapsed, days_remaining=remaining, reminders_left=reminders_left
        )

    return ReminderStatus(ReminderState.PENDING, "Pending", False, elapsed, reminders_left=reminders_left)


def status_label(loan, now: datetime, policy: ReminderPolicy = DEFAULT_POLICY) -> str:
    """Human readable reminder status"""
    return evaluate(loan, now, policy).label
