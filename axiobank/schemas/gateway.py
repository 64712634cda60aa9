"""
Result types of the external gateway clients (SMS and 3-D Secure).
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class SmsResult(BaseModel):
    """Outcome of one SMS send."""

    success: bool
    provider: str
    recipient: str
    message_id: str | None = None
    error: str | None = None


class EnrollmentResult(BaseModel):
    """3DS enrollment of a card range."""

    enrolled: bool
    version: str | None = None
    acs_url: str | None = None


class BrowserInfo(BaseModel):
    """Browser data required by EMV 3DS for the browser channel."""

    accept_header: str = "text/html,application/json"
    ip_address: str = "127.0.0.1"
    java_enabled: bool = False
    javascript_enabled: bool = True
    language: str = "en-US"
    color_depth: int = 24
    screen_height: int = 1080
    screen_width: int = 1920
    time_zone: int = 0
    user_agent: str = "Mozilla/5.0"


class AuthenticationRequest(BaseModel):
    """Cardholder authentication request for a purchase."""

    card_number: str
    expiry_month: int
    expiry_year: int
    amount: Decimal = Field(gt=0)
    currency: str = "USD"
    merchant_name: str | None = None
    cardholder_name: str | None = None
    email: str | None = None
    browser_info: BrowserInfo = Field(default_factory=BrowserInfo)


class AuthenticationResult(BaseModel):
    """
    Outcome of a 3DS authentication step.

    status is one of Success, Failed, Unavailable, Attempted,
    ChallengeRequired or Error.
    """

    status: str
    authentication_id: str | None = None
    trans_status: str | None = None
    challenge_url: str | None = None
    cavv: str | None = None
    eci: str | None = None
    xid: str | None = None
    error: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)
