"""
Unit tests for money, time and identifier helpers.
"""

import re
from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from axiobank.core.formatting import ensure_utc, relative_time, start_of_day, to_money
from axiobank.core.identifiers import (
    generate_account_number,
    generate_customer_number,
    generate_transaction_id,
)
from axiobank.schemas.common import ApiResponse, ListResponse, PaginationParams

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class TestToMoney:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, Decimal("0.00")),
            (10, Decimal("10.00")),
            (10.005, Decimal("10.01")),
            (Decimal("1.234"), Decimal("1.23")),
            ("99.995", Decimal("100.00")),
        ],
    )
    def test_rounds_half_up_to_cents(self, value, expected):
        assert to_money(value) == expected


class TestRelativeTime:
    @pytest.mark.parametrize(
        "delta, expected",
        [
            (timedelta(seconds=30), "Just now"),
            (timedelta(minutes=45), "45 minutes ago"),
            (timedelta(minutes=90), "1 hour ago"),
            (timedelta(hours=5), "5 hours ago"),
            (timedelta(days=3, hours=2), "3 days ago"),
        ],
    )
    def test_buckets(self, delta, expected):
        assert relative_time(NOW - delta, NOW) == expected

    def test_naive_datetimes_are_treated_as_utc(self):
        naive = datetime(2024, 6, 1, 11, 0)

        assert relative_time(naive, NOW) == "1 hour ago"


class TestTimeHelpers:
    def test_ensure_utc_attaches_timezone(self):
        assert ensure_utc(datetime(2024, 1, 1)).tzinfo is UTC

    def test_start_of_day(self):
        assert start_of_day(NOW.date()) == datetime(2024, 6, 1, tzinfo=UTC)


class TestIdentifiers:
    def test_transaction_id_format(self):
        for _ in range(50):
            assert re.fullmatch(r"[A-Z]{3}\d{2}[A-Z0-9]{5}", generate_transaction_id())

    def test_seven_digit_numbers(self):
        for generate in (generate_account_number, generate_customer_number):
            number = generate()
            assert re.fullmatch(r"[1-9]\d{6}", number)


class TestEnvelopes:
    def test_money_serializes_as_two_place_string(self):
        from pydantic import BaseModel

        from axiobank.schemas.common import Money

        class Payload(BaseModel):
            amount: Money

        assert Payload(amount=Decimal("12.5")).model_dump(mode="json") == {"amount": "12.50"}

    def test_list_response_defaults_totals_to_page(self):
        response = ListResponse.ok([1, 2, 3])

        assert response.total == 3
        assert response.page_size == 3

    def test_fail_envelope(self):
        response = ApiResponse.fail("Card not found", error="NOT_FOUND")

        assert response.success is False
        assert response.data is None

    def test_pagination_offset(self):
        assert PaginationParams(page=3, page_size=25).offset == 50
