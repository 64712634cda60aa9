"""
Unit tests for the Mastercard 3-D Secure client.

Tests:
- OAuth 1.0a signing (base string, body hash, RSA-SHA256 signature)
- transStatus mapping
- Enrollment, initiation, challenge and verification over MockTransport
"""

import base64
import hashlib
import json
from decimal import Decimal
from urllib.parse import unquote

import httpx
import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from axiobank.core.config import settings
from axiobank.exceptions import ExternalServiceError
from axiobank.schemas.gateway import AuthenticationRequest
from axiobank.services.mastercard_auth_service import (
    MastercardAuthService,
    build_oauth_header,
    load_signing_key,
    map_trans_status,
    signature_base_string,
)

BASE_URL = "https://mc.test"


@pytest.fixture(scope="module")
def signing_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _parse_oauth_header(header: str) -> dict[str, str]:
    assert header.startswith("OAuth ")
    params = {}
    for item in header[len("OAuth "):].split(","):
        key, value = item.split("=", 1)
        params[key] = unquote(value.strip('"'))
    return params


def _assert_signed(request: httpx.Request, key) -> dict[str, str]:
    params = _parse_oauth_header(request.headers["Authorization"])
    signature = base64.b64decode(params.pop("oauth_signature"))
    base_string = signature_base_string(request.method, str(request.url), params)
    key.public_key().verify(
        signature, base_string.encode(), padding.PKCS1v15(), hashes.SHA256()
    )
    return params


def _service(handler, key) -> MastercardAuthService:
    return MastercardAuthService(
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        private_key=key,
        consumer_key="consumer-key",
        base_url=BASE_URL,
    )


def _purchase(**overrides) -> AuthenticationRequest:
    values = {
        "card_number": "5555 5555 5555 4444",
        "expiry_month": 3,
        "expiry_year": 2031,
        "amount": Decimal("12.345"),
        "currency": "eur",
        "cardholder_name": "Jordan Blake",
    }
    values.update(overrides)
    return AuthenticationRequest(**values)


class TestOAuthSigning:
    def test_signature_base_string_sorts_and_encodes(self):
        base = signature_base_string(
            "get",
            "HTTPS://MC.test/path?b=2&a=x y",
            {"oauth_nonce": "n"},
        )

        assert base == (
            "GET&https%3A%2F%2Fmc.test%2Fpath&a%3Dx%2520y%26b%3D2%26oauth_nonce%3Dn"
        )

    def test_build_oauth_header_is_verifiable(self, signing_key):
        body = b'{"x": 1}'
        header = build_oauth_header(
            "POST",
            f"{BASE_URL}/resource",
            body,
            "consumer-key",
            signing_key,
            nonce="abc123",
            timestamp=1700000000,
        )

        params = _parse_oauth_header(header)
        signature = base64.b64decode(params.pop("oauth_signature"))
        assert params["oauth_body_hash"] == base64.b64encode(
            hashlib.sha256(body).digest()
        ).decode()
        assert params["oauth_nonce"] == "abc123"
        assert params["oauth_timestamp"] == "1700000000"
        assert params["oauth_signature_method"] == "RSA-SHA256"
        signing_key.public_key().verify(
            signature,
            signature_base_string("POST", f"{BASE_URL}/resource", params).encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )

    def test_load_signing_key_rejects_corrupt_keystore(self, tmp_path):
        keystore = tmp_path / "corrupt.p12"
        keystore.write_bytes(b"not a keystore")

        with pytest.raises(ExternalServiceError) as exc_info:
            load_signing_key(str(keystore), "secret")

        assert exc_info.value.details["service"] == "Mastercard"


class TestMapTransStatus:
    def test_success_copies_authentication_values(self):
        result = map_trans_status(
            {
                "transStatus": "Y",
                "threeDSServerTransID": "auth-1",
                "authenticationValue": "CAVV==",
                "eci": "02",
                "dsTransID": "ds-1",
            }
        )

        assert result.status == "Success"
        assert (result.cavv, result.eci, result.xid) == ("CAVV==", "02", "ds-1")

    def test_challenge_required(self):
        result = map_trans_status({"transStatus": "C", "acsURL": "https://acs.test"})

        assert result.status == "ChallengeRequired"
        assert result.challenge_url == "https://acs.test"

    @pytest.mark.parametrize(
        "trans_status, status, error",
        [
            ("N", "Failed", "Authentication failed"),
            ("U", "Unavailable", None),
            ("A", "Attempted", None),
            ("Z", "Error", "Unknown status: Z"),
        ],
    )
    def test_other_statuses(self, trans_status, status, error):
        result = map_trans_status({"transStatus": trans_status})

        assert result.status == status
        assert result.error == error


@pytest.mark.asyncio
class TestMastercardAuthService:
    async def test_check_card_enrollment_sends_prefix_only(self, signing_key):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(
                200,
                json={"enrolled": True, "protocolVersion": "2.2.0", "acsUrl": "https://acs"},
            )

        service = _service(handler, signing_key)
        result = await service.check_card_enrollment("5555 5555 5555 4444")
        await service.aclose()

        assert result.enrolled is True
        assert result.version == "2.2.0"
        request = captured["request"]
        assert request.url.params["accountNumber"] == "55555555"
        _assert_signed(request, signing_key)

    async def test_check_card_enrollment_failure_reads_as_not_enrolled(self, signing_key):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        result = await _service(handler, signing_key).check_card_enrollment("5555555555554444")

        assert result.enrolled is False

    async def test_missing_keystore_reads_as_not_enrolled(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"enrolled": True})

        service = _service(handler, None)
        result = await service.check_card_enrollment("5555555555554444")

        assert result.enrolled is False

    async def test_unreadable_keystore_reads_as_not_enrolled(self, monkeypatch, tmp_path):
        monkeypatch.setattr(
            settings, "mastercard_keystore_path", str(tmp_path / "missing.p12")
        )

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"enrolled": True})

        service = _service(handler, None)
        enrollment = await service.check_card_enrollment("5555555555554444")
        verification = await service.verify_authentication("auth-1")

        assert enrollment.enrolled is False
        assert verification.status == "Error"
        assert "missing.p12" in verification.error

    async def test_initiate_3ds_authentication(self, signing_key):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(
                200,
                json={
                    "transStatus": "C",
                    "threeDSServerTransID": "auth-42",
                    "acsURL": "https://acs.test/challenge",
                },
            )

        result = await _service(handler, signing_key).initiate_3ds_authentication(
            _purchase()
        )

        assert result.status == "ChallengeRequired"
        assert result.authentication_id == "auth-42"
        request = captured["request"]
        payload = json.loads(request.content)
        assert payload["purchaseAmount"] == "1235"
        assert payload["purchaseCurrency"] == "978"
        assert payload["acctNumber"] == "5555555555554444"
        assert payload["cardExpiryDate"] == "3103"
        params = _assert_signed(request, signing_key)
        assert params["oauth_body_hash"] == base64.b64encode(
            hashlib.sha256(request.content).digest()
        ).decode()

    async def test_initiate_3ds_authentication_http_error(self, signing_key):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        with pytest.raises(ExternalServiceError):
            await _service(handler, signing_key).initiate_3ds_authentication(_purchase())

    async def test_process_challenge_response(self, signing_key):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json={"transStatus": "Y", "eci": "02"})

        result = await _service(handler, signing_key).process_challenge_response(
            "auth-42", "123456"
        )

        assert result.status == "Success"
        assert captured["request"].url.path == "/ics/pa/api/v1/authentications/auth-42/results"
        assert json.loads(captured["request"].content) == {"challengeResponse": "123456"}

    async def test_verify_authentication_error_is_reported(self, signing_key):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        result = await _service(handler, signing_key).verify_authentication("auth-42")

        assert result.status == "Error"
        assert result.authentication_id == "auth-42"
        assert "timed out" in result.error
