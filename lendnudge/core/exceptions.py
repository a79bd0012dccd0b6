"""Custom exceptions for LendNudge."""


class LendNudgeError(Exception):
    """Base exception for all LendNudge errors."""

    code = "lendnudge_error"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class LoanValidationError(LendNudgeError):
    """Raised when loan input is rejected before reaching the store."""

    code = "validation_error"


class LoanNotFound(LendNudgeError):
    """Raised when a loan does not exist or belongs to another owner."""

    code = "loan_not_found"

    def __init__(self, loan_id: str):
        super().__init__(f"Loan {loan_id} not found", {"loan_id": loan_id})
        self.loan_id = loan_id


class ReminderNotAllowed(LendNudgeError):
    """Raised when a reminder is recorded for a loan that is not due."""

    code = "reminder_not_allowed"


class StoreUnavailable(LendNudgeError):
    """Raised when the loan store fails; callers surface it, nothing retries."""

    code = "store_unavailable"
