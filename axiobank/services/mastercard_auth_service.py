"""
Mastercard 3-D Secure client.

Requests are signed with OAuth 1.0a (RSA-SHA256 with a body hash), the
scheme Mastercard APIs require. The signing key is read from the PKCS#12
keystore configured in settings, or passed in directly.
"""

import base64
import hashlib
import json
import logging
import secrets
import time
import uuid
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any
from urllib.parse import parse_qsl, quote, urlsplit

import httpx
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import pkcs12

from axiobank.core.config import settings
from axiobank.core.security import digits_only
from axiobank.exceptions import ExternalServiceError
from axiobank.schemas.gateway import (
    AuthenticationRequest,
    AuthenticationResult,
    EnrollmentResult,
)

logger = logging.getLogger(__name__)

CARD_RANGE_PATH = "/ics/pa/api/v1/card-range"
AUTHENTICATIONS_PATH = "/ics/pa/api/v1/authentications"

# ISO 4217 numeric codes
CURRENCY_CODES = {"USD": "840", "EUR": "978", "GBP": "826", "KES": "404"}
DEFAULT_CURRENCY_CODE = "840"

TRANS_STATUS_RESULTS = {
    "Y": "Success",
    "N": "Failed",
    "U": "Unavailable",
    "A": "Attempted",
    "C": "ChallengeRequired",
}


def _percent_encode(value: str) -> str:
    return quote(str(value), safe="~")


def load_signing_key(keystore_path: str, password: str) -> RSAPrivateKey:
    """
    Load the RSA private key from a PKCS#12 keystore.

    Raises:
        ExternalServiceError: If the keystore is unreadable, the password is
            wrong, or it holds no RSA key
    """
    try:
        data = Path(keystore_path).read_bytes()
        private_key, _, _ = pkcs12.load_key_and_certificates(
            data, password.encode() if password else None
        )
    except (OSError, ValueError) as exc:
        raise ExternalServiceError(
            "Mastercard", f"Cannot load signing keystore {keystore_path}: {exc}"
        ) from exc
    if not isinstance(private_key, RSAPrivateKey):
        raise ExternalServiceError("Mastercard", "Keystore does not hold an RSA key")
    return private_key


def signature_base_string(method: str, url: str, oauth_params: dict[str, str]) -> str:
    """
    OAuth 1.0a signature base string.

    Query parameters and OAuth parameters are percent-encoded, sorted by
    name then value and joined; the URL is used without its query.
    """
    parts = urlsplit(url)
    base_uri = f"{parts.scheme.lower()}://{parts.netloc.lower()}{parts.path or '/'}"
    params = parse_qsl(parts.query, keep_blank_values=True) + list(oauth_params.items())
    encoded = sorted((_percent_encode(k), _percent_encode(v)) for k, v in params)
    normalized = "&".join(f"{k}={v}" for k, v in encoded)
    return "&".join(
        [method.upper(), _percent_encode(base_uri), _percent_encode(normalized)]
    )


def build_oauth_header(
    method: str,
    url: str,
    body: bytes,
    consumer_key: str,
    private_key: RSAPrivateKey,
    nonce: str | None = None,
    timestamp: int | None = None,
) -> str:
    """
    Build the OAuth 1.0a Authorization header for a Mastercard API call.

    Args:
        method: HTTP method
        url: Full request URL, including any query string
        body: Raw request body (b"" for GET)
        consumer_key: Mastercard consumer key
        private_key: RSA key the signature is made with
        nonce: Override for tests (default: random)
        timestamp: Override for tests (default: now)

    Returns:
        Header value starting with "OAuth "
    """
    oauth_params = {
        "oauth_body_hash": base64.b64encode(hashlib.sha256(body).digest()).decode(),
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce or secrets.token_hex(8),
        "oauth_signature_method": "RSA-SHA256",
        "oauth_timestamp": str(timestamp if timestamp is not None else int(time.time())),
        "oauth_version": "1.0",
    }
    base_string = signature_base_string(method, url, oauth_params)
    signature = private_key.sign(base_string.encode(), padding.PKCS1v15(), hashes.SHA256())
    oauth_params["oauth_signature"] = base64.b64encode(signature).decode()
    return "OAuth " + ",".join(
        f'{key}="{_percent_encode(value)}"' for key, value in oauth_params.items()
    )


def map_trans_status(payload: dict[str, Any]) -> AuthenticationResult:
    """Translate an authentication response into an AuthenticationResult."""
    trans_status = payload.get("transStatus")
    status = TRANS_STATUS_RESULTS.get(trans_status, "Error")
    result = AuthenticationResult(
        status=status,
        authentication_id=payload.get("threeDSServerTransID"),
        trans_status=trans_status,
        raw=payload,
    )
    if status == "Success":
        result.cavv = payload.get("authenticationValue", "")
        result.eci = payload.get("eci", "")
        result.xid = payload.get("dsTransID", "")
    elif status == "ChallengeRequired":
        result.challenge_url = payload.get("acsURL")
    elif status == "Failed":
        result.error = "Authentication failed"
    elif status == "Error":
        result.error = f"Unknown status: {trans_status}"
    return result


class MastercardAuthService:
    """
    Client for the Mastercard 3DS authentication API.

    Args:
        client: httpx client to send with (default: a new AsyncClient)
        private_key: Signing key (default: loaded from the configured keystore)
        consumer_key: OAuth consumer key (default: settings.mastercard_consumer_key)
        base_url: API base URL (default: the sandbox)
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        private_key: RSAPrivateKey | None = None,
        consumer_key: str | None = None,
        base_url: str | None = None,
    ):
        self.client = client or httpx.AsyncClient(timeout=settings.mastercard_timeout_seconds)
        self.consumer_key = consumer_key or settings.mastercard_consumer_key
        self.base_url = (base_url or settings.mastercard_base_url).rstrip("/")
        self._private_key = private_key

    async def aclose(self) -> None:
        await self.client.aclose()

    @property
    def private_key(self) -> RSAPrivateKey:
        if self._private_key is None:
            if not settings.mastercard_keystore_path:
                raise ExternalServiceError("Mastercard", "Signing keystore is not configured")
            self._private_key = load_signing_key(
                settings.mastercard_keystore_path, settings.mastercard_keystore_password
            )
        return self._private_key

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        body = json.dumps(payload).encode() if payload is not None else b""
        request = self.client.build_request(
            method,
            f"{self.base_url}{path}",
            params=params,
            content=body or None,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        request.headers["Authorization"] = build_oauth_header(
            method, str(request.url), body, self.consumer_key, self.private_key
        )
        response = await self.client.send(request)
        response.raise_for_status()
        return response.json()

    async def check_card_enrollment(self, card_number: str) -> EnrollmentResult:
        """
        Check whether the card's range is enrolled in 3DS.

        Only the first 8 digits are sent. Any failure reads as not enrolled.
        """
        digits = digits_only(card_number)
        try:
            data = await self._request(
                "GET", CARD_RANGE_PATH, params={"accountNumber": digits[:8]}
            )
        except (httpx.HTTPError, ValueError, ExternalServiceError) as exc:
            logger.warning(f"Enrollment check for card ending {digits[-4:]} failed: {exc}")
            return EnrollmentResult(enrolled=False)

        return EnrollmentResult(
            enrolled=bool(data.get("enrolled")),
            version=data.get("protocolVersion"),
            acs_url=data.get("acsUrl"),
        )

    def _authentication_payload(self, request: AuthenticationRequest) -> dict[str, Any]:
        cents = (request.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        browser = request.browser_info
        merchant_name = request.merchant_name or settings.mastercard_merchant_name
        return {
            "messageVersion": "2.2.0",
            "threeDSServerTransID": str(uuid.uuid4()),
            "threeDSRequestorName": merchant_name,
            "messageCategory": "01",
            "acquirerBIN": settings.mastercard_acquirer_bin,
            "merchantName": merchant_name,
            "transType": "01",
            "purchaseAmount": str(int(cents)),
            "purchaseCurrency": CURRENCY_CODES.get(
                request.currency.upper(), DEFAULT_CURRENCY_CODE
            ),
            "purchaseExponent": "2",
            "purchaseDate": datetime.now(UTC).strftime("%Y%m%d%H%M%S"),
            "acctNumber": digits_only(request.card_number),
            "cardExpiryDate": f"{request.expiry_year % 100:02d}{request.expiry_month:02d}",
            "cardholderName": request.cardholder_name,
            "email": request.email,
            "deviceChannel": "02",
            "browserInfo": {
                "browserAcceptHeader": browser.accept_header,
                "browserIP": browser.ip_address,
                "browserJavaEnabled": browser.java_enabled,
                "browserJavascriptEnabled": browser.javascript_enabled,
                "browserLanguage": browser.language,
                "browserColorDepth": str(browser.color_depth),
                "browserScreenHeight": str(browser.screen_height),
                "browserScreenWidth": str(browser.screen_width),
                "browserTZ": str(browser.time_zone),
                "browserUserAgent": browser.user_agent,
            },
        }

    async def initiate_3ds_authentication(
        self, request: AuthenticationRequest
    ) -> AuthenticationResult:
        """
        Start a 3DS authentication for a purchase.

        Raises:
            ExternalServiceError: If the network call fails
        """
        payload = self._authentication_payload(request)
        try:
            data = await self._request("POST", AUTHENTICATIONS_PATH, payload=payload)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"3DS initiation failed: {exc}")
            raise ExternalServiceError(
                "Mastercard", f"Failed to initiate 3DS authentication: {exc}"
            ) from exc

        result = map_trans_status(data)
        logger.info(f"3DS authentication {result.authentication_id} initiated: {result.status}")
        return result

    async def process_challenge_response(
        self, authentication_id: str, challenge_response: str
    ) -> AuthenticationResult:
        """
        Submit the cardholder's challenge response.

        Raises:
            ExternalServiceError: If the network call fails
        """
        try:
            data = await self._request(
                "POST",
                f"{AUTHENTICATIONS_PATH}/{authentication_id}/results",
                payload={"challengeResponse": challenge_response},
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"3DS challenge for {authentication_id} failed: {exc}")
            raise ExternalServiceError(
                "Mastercard", f"Failed to process challenge response: {exc}"
            ) from exc
        return map_trans_status(data)

    async def verify_authentication(self, authentication_id: str) -> AuthenticationResult:
        """Fetch the final result; transport failures come back as status Error."""
        try:
            data = await self._request(
                "GET", f"{AUTHENTICATIONS_PATH}/{authentication_id}/results"
            )
        except (httpx.HTTPError, ValueError, ExternalServiceError) as exc:
            logger.error(f"3DS verification for {authentication_id} failed: {exc}")
            return AuthenticationResult(
                status="Error", authentication_id=authentication_id, error=str(exc)
            )
        return map_trans_status(data)
