# Reminders module
from lendnudge.modules.reminders.eligibility import (
    ReminderPolicy, ReminderState, ReminderStatus,
    days_since_loan, is_reminder_due, status_label, evaluate
)
from lendnudge.modules.reminders.composer import (
    ReminderTone, OutboundChannel, REMINDER_TEMPLATES,
    compose_message, compose_email_template, build_outbound_link
)

__all__ = [
    "ReminderPolicy", "ReminderState", "ReminderStatus",
    "days_since_loan", "is_reminder_due", "status_label", "evaluate",
    "ReminderTone", "OutboundChannel", "REMINDER_TEMPLATES",
    "compose_message", "compose_email_template", "build_outbound_link",
]
