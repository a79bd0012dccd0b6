from pydantic import BaseModel, Field
from typing import Optional, List, Dict

from lendnudge.modules.loans.schemas import LoanWithStatusResponse
from lendnudge.modules.reminders.composer import ReminderTone


class ReminderTemplateResponse(BaseModel):
    id: str
    tone: ReminderTone
    message: str


class ReminderTemplateListResponse(BaseModel):
    templates: List[ReminderTemplateResponse]


class EmailTemplateResponse(BaseModel):
    subject: str
    body: str


class ComposeRequest(BaseModel):
    """Omit template_id to get a random template (the "regenerate" button)"""
    template_id: Optional[str] = None
    with_currency_symbol: bool = True


class ComposeResponse(BaseModel):
    loan_id: str
    template: ReminderTemplateResponse
    message: str
    email_template: EmailTemplateResponse
    links: Dict[str, str]


class LinksRequest(BaseModel):
    """Message to hand off; defaults to the e-mail template body"""
    message: Optional[str] = Field(None, max_length=2000)


class LinksResponse(BaseModel):
    loan_id: str
    message: str
    links: Dict[str, str]


class ReminderSentResponse(LoanWithStatusResponse):
    message: str = "Reminder logged"
