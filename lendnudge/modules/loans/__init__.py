# Loans module
from lendnudge.modules.loans.models import Loan, Currency
from lendnudge.modules.loans.services import LoanService

__all__ = ["Loan", "Currency", "LoanService"]
