"""
Unit tests for the envelope decorator.

Tests cover:
- Successful results pass through untouched
- AppException subclasses become failure envelopes with their error code
- Pydantic validation errors become INVALID_INPUT
- Unexpected exceptions become generic failures with the decorator's code
- The service session is rolled back on every failure
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel

from axiobank.core.handlers import envelope
from axiobank.exceptions import NotFoundError, ValidationError
from axiobank.schemas.common import ApiResponse, ListResponse


class _Amount(BaseModel):
    value: int


class _Service:
    def __init__(self):
        self.session = MagicMock()
        self.session.rollback = AsyncMock()

    @envelope("Failed to do thing")
    async def succeed(self):
        return ApiResponse.ok("done", message="Thing done")

    @envelope("Failed to do thing")
    async def not_found(self):
        raise NotFoundError("Thing")

    @envelope("Failed to do thing")
    async def rejected(self):
        raise ValidationError("Card has expired", error_code="CARD_EXPIRED")

    @envelope("Failed to do thing")
    async def bad_input(self):
        _Amount(value="not a number")

    @envelope("Failed to do thing", error_code="THING_ERROR")
    async def crash(self):
        raise RuntimeError("disk on fire")

    @envelope("Failed to list things", response_cls=ListResponse)
    async def crash_list(self):
        raise RuntimeError("boom")


@pytest.mark.asyncio
class TestEnvelope:
    """Tests for the envelope decorator."""

    async def test_success_passes_through(self):
        service = _Service()

        response = await service.succeed()

        assert response.success is True
        assert response.data == "done"
        assert response.message == "Thing done"
        service.session.rollback.assert_not_awaited()

    async def test_app_exception_becomes_failure(self):
        service = _Service()

        response = await service.not_found()

        assert response.success is False
        assert response.message == "Thing not found"
        assert response.error == "NOT_FOUND"
        assert response.data is None
        service.session.rollback.assert_awaited_once()

    async def test_error_code_is_preserved(self):
        response = await _Service().rejected()

        assert response.error == "CARD_EXPIRED"
        assert response.message == "Card has expired"

    async def test_pydantic_error_becomes_invalid_input(self):
        response = await _Service().bad_input()

        assert response.success is False
        assert response.error == "INVALID_INPUT"

    async def test_unexpected_error_uses_failure_message(self):
        service = _Service()

        response = await service.crash()

        assert response.success is False
        assert response.message == "Failed to do thing: disk on fire"
        assert response.error == "THING_ERROR"
        service.session.rollback.assert_awaited_once()

    async def test_list_failure_has_empty_data(self):
        response = await _Service().crash_list()

        assert isinstance(response, ListResponse)
        assert response.success is False
        assert response.data == []
        assert response.total == 0
