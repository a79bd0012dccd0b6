from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import random

from lendnudge.core.clock import Clock, utc_now
from lendnudge.core.config import settings
from lendnudge.core.security import decode_token
from lendnudge.modules.reminders.eligibility import ReminderPolicy

bearer_scheme = HTTPBearer(auto_error=False)

_template_rng = random.Random()


async def get_current_owner_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """Get the owner id (JWT ``sub``) of the authenticated caller"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    owner_id = payload.get("sub")
    token_type = payload.get("type")

    if not owner_id or token_type != "access":
        raise credentials_exception

    return str(owner_id)


def get_clock() -> Clock:
    """Time source for request handlers; overridden in tests"""
    return utc_now


def get_rng() -> random.Random:
    """Randomness used when picking a reminder template"""
    return _template_rng


def get_reminder_policy() -> ReminderPolicy:
    """Reminder policy built from settings"""
    return ReminderPolicy.from_settings(settings)
