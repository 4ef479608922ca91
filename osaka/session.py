# osaka/session.py
"""
Admin session gate.

A single shared password, not a security boundary. A successful login yields
an ``AdminSession`` that callers pass around explicitly; whether it is valid
is a pure function of the session and the settings.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .errors import AuthError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminSession:
    token: str


def session_token(settings: Settings) -> str:
    return hmac.new(
        settings.session_secret.encode(), settings.admin_password.encode(), hashlib.sha256
    ).hexdigest()


def login(password: str, settings: Settings) -> AdminSession:
    if not hmac.compare_digest(password.encode(), settings.admin_password.encode()):
        logger.warning("admin login rejected")
        raise AuthError("Incorrect password. Please try again.")
    return AdminSession(token=session_token(settings))


def is_valid(session: Optional[AdminSession], settings: Settings) -> bool:
    if session is None or not session.token:
        return False
    return hmac.compare_digest(session.token, session_token(settings))
