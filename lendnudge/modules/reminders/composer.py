"""Reminder message composition.

Builds reminder text from a catalogue of tone templates, the deterministic
e-mail variant, and deep links that hand the text over to a chat app, the
native SMS composer or a mail client. Nothing here sends anything or touches
the loan.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote
import enum
import random
import re


class ReminderTone(str, enum.Enum):
    CASUAL = "casual"
    FRIENDLY = "friendly"
    GENTLE = "gentle"


class OutboundChannel(str, enum.Enum):
    """Where a composed reminder is handed off"""
    WHATSAPP = "whatsapp"  # chat app deep link
    SMS = "sms"            # native text message composer
    EMAIL = "email"        # mail client


@dataclass(frozen=True)
class ReminderTemplate:
    id: str
    tone: ReminderTone
    message: str


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    body: str


REMINDER_TEMPLATES: Tuple[ReminderTemplate, ...] = (
    ReminderTemplate(
        id="1",
        tone=ReminderTone.CASUAL,
        message=(
            "Hey {name}! 😊 Hope you're doing well! Just a friendly reminder about the "
            "{amount} I lent you on {date}. No rush at all, just wanted to check in!"
        ),
    ),
    ReminderTemplate(
        id="2",
        tone=ReminderTone.FRIENDLY,
        message=(
            "Hi {name}! 👋 Quick heads up - I have that {amount} from {date} on my books. "
            "Whenever you get a chance to settle it would be great!"
        ),
    ),
    ReminderTemplate(
        id="3",
        tone=ReminderTone.GENTLE,
        message=(
            "Hey {name}, hope all is well! 🙂 I wanted to gently remind you about the "
            "{amount} from {date}. I know things get busy - just let me know when works for you!"
        ),
    ),
    ReminderTemplate(
        id="4",
        tone=ReminderTone.FRIENDLY,
        message=(
            "Hi {name}! 💙 Reaching out about the {amount} we discussed on {date}. "
            "No pressure, just wanted to circle back. Thanks for understanding!"
        ),
    ),
    ReminderTemplate(
        id="5",
        tone=ReminderTone.GENTLE,
        message=(
            "Hey {name}! 😊 I hope you've been good! This is a gentle nudge about the "
            "{amount} from {date}. Totally get that life gets hectic - whenever you can!"
        ),
    ),
)

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
}

_PLACEHOLDER = re.compile(r"\{(name|amount|date)\}")

# Characters encodeURIComponent leaves alone besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


def currency_symbol(currency: str) -> str:
    """Display symbol for a currency code; unknown codes are returned as-is"""
    return CURRENCY_SYMBOLS.get(currency, currency)


def format_amount(amount, currency: Optional[str] = None) -> str:
    """
    Render an amount the way it appears in messages.

    Whole amounts drop the decimals ("500"), anything else keeps two
    ("12.50"). With a currency the symbol is prefixed ("₹500").
    """
    value = Decimal(str(amount))
    if value == value.to_integral_value():
        text = str(value.quantize(Decimal(1)))
    else:
        text = str(value.quantize(Decimal("0.01")))
    if currency is None:
        return text
    return f"{currency_symbol(currency)}{text}"


def format_loan_date(value) -> str:
    """Abbreviated month, day, year, e.g. Mar 5, 2024"""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def encode_uri_component(text: str) -> str:
    """Percent-encode text for use inside a URI component"""
    return quote(text, safe=_URI_COMPONENT_SAFE)


def get_template(template_id: str) -> Optional[ReminderTemplate]:
    for template in REMINDER_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def templates_for_tone(tone: Optional[ReminderTone] = None) -> List[ReminderTemplate]:
    if tone is None:
        return list(REMINDER_TEMPLATES)
    return [t for t in REMINDER_TEMPLATES if t.tone == tone]


def select_template(template_id: Optional[str] = None, rng: Optional[random.Random] = None) -> ReminderTemplate:
    """
    Pick a template by id, or at random when no id is given.

    Unknown ids fall back to the first template in the catalogue.
    """
    if template_id is not None:
        return get_template(template_id) or REMINDER_TEMPLATES[0]
    return (rng or random.Random()).choice(REMINDER_TEMPLATES)


def render_template(template: ReminderTemplate, loan, with_currency_symbol: bool = True) -> str:
    values = {
        "name": loan.friend_name,
        "amount": format_amount(loan.amount, loan.currency if with_currency_symbol else None),
        "date": format_loan_date(loan.date_loaned),
    }
    # Single pass so placeholder-like text inside a name is left untouched
    message = _PLACEHOLDER.sub(lambda match: values[match.group(1)], template.message)

    if loan.reason:
        message += f" ({loan.reason})"

    return message


def compose_message(
    loan,
    template_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
    with_currency_symbol: bool = True
) -> str:
    """
    Compose a reminder for ``loan``.

    ``with_currency_symbol=False`` gives the plain-numeral amount used by
    the simple composer.
    """
    template = select_template(template_id, rng)
    return render_template(template, loan, with_currency_symbol)


def compose_email_template(loan) -> EmailTemplate:
    """Fixed subject/body for manual sending and as fallback body text"""
    date_text = format_loan_date(loan.date_loaned)
    reason_text = f" ({loan.reason})" if loan.reason else ""
    amount_text = format_amount(loan.amount, loan.currency)

    return EmailTemplate(
        subject=f"Friendly reminder about the money from {date_text}",
        body=(
            f"Hi {loan.friend_name},\n"
            "\n"
            "Hope you're doing well! 😊\n"
            "\n"
            f"I wanted to send a quick, friendly reminder about the {amount_text} "
            f"from {date_text}{reason_text}.\n"
            "\n"
            "No rush at all - just wanted to check in! Let me know when works for you.\n"
            "\n"
            "Thanks so much!"
        ),
    )


def _whatsapp_link(loan, message: str) -> str:
    encoded = encode_uri_component(message)
    if loan.phone_number:
        digits = re.sub(r"\D", "", loan.phone_number)
        return f"https://wa.me/{digits}?text={encoded}"
    return f"https://wa.me/?text={encoded}"


def _sms_link(loan, message: str) -> str:
    encoded = encode_uri_component(message)
    if loan.phone_number:
        return f"sms:{loan.phone_number}?body={encoded}"
    return f"sms:?body={encoded}"


def _email_link(loan, message: str) -> str:
    body = encode_uri_component(message)
    if loan.email:
        address = quote(loan.email, safe="@")
        subject = encode_uri_component(f"Quick reminder - {loan.friend_name}")
        return f"mailto:{address}?subject={subject}&body={body}"
    subject = encode_uri_component(compose_email_template(loan).subject)
    return f"mailto:?subject={subject}&body={body}"


_LINK_BUILDERS = {
    OutboundChannel.WHATSAPP: _whatsapp_link,
    OutboundChannel.SMS: _sms_link,
    OutboundChannel.EMAIL: _email_link,
}


def build_outbound_link(channel: OutboundChannel, loan, message: str) -> str:
    """
    Deep link handing ``message`` to the given channel.

    Without a phone number or e-mail address the link opens the composer
    with no recipient so the user picks one.
    """
    return _LINK_BUILDERS[OutboundChannel(channel)](loan, message)


def build_outbound_links(loan, message: str) -> Dict[str, str]:
    return {channel.value: build_outbound_link(channel, loan, message) for channel in OutboundChannel}
