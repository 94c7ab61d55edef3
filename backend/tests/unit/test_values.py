"""
Unit Tests - Value Coercion, Rounding and Holding Period
"""
import pytest
from datetime import date, datetime, timezone, timedelta
from decimal import Decimal

from stock_tracker.core.reconciliation.values import (
    HoldingPeriod,
    percent_of,
    round_money,
    round_percent,
    round_price,
    to_date,
    to_datetime,
    to_decimal,
    to_int,
    to_text,
)


class TestToDecimal:
    """Tests for numeric coercion."""

    @pytest.mark.parametrize("value,expected", [
        (10, Decimal("10")),
        (0.1, Decimal("0.1")),
        ("1450.25", Decimal("1450.25")),
        ("  1,234.5 ", Decimal("1234.5")),
        (Decimal("3.14"), Decimal("3.14")),
    ])
    def test_numeric_values(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [
        None, "", "   ", "abc", "12abc", True, False,
        float("nan"), float("inf"), "NaN", "Infinity", [], {},
    ])
    def test_uninterpretable_values_are_absent(self, value):
        assert to_decimal(value) is None

    def test_float_keeps_short_representation(self):
        """0.1 should not turn into 0.1000000000000000055..."""
        assert str(to_decimal(0.1)) == "0.1"

    @pytest.mark.parametrize("value", [1e15, -1e15, "1e25", 1e30, Decimal("1E+40")])
    def test_out_of_range_magnitudes_are_absent(self, value):
        assert to_decimal(value) is None

    def test_largest_in_range_value_kept(self):
        assert to_decimal("999999999999999.99") == Decimal("999999999999999.99")


class TestToInt:
    """Tests for quantity coercion."""

    def test_truncates_fractions(self):
        assert to_int("10.9") == 10
        assert to_int(7.2) == 7

    def test_negative_values_kept(self):
        assert to_int(-5) == -5

    def test_invalid_is_absent(self):
        assert to_int("ten") is None
        assert to_int(None) is None


class TestDates:
    """Tests for date and timestamp coercion."""

    def test_iso_date_string(self):
        assert to_date("2024-01-15") == date(2024, 1, 15)

    def test_iso_timestamp_string_keeps_date_part(self):
        assert to_date("2024-01-15T18:45:00.000Z") == date(2024, 1, 15)

    def test_datetime_object(self):
        assert to_date(datetime(2024, 1, 15, 12, 0)) == date(2024, 1, 15)

    @pytest.mark.parametrize("value", ["", "15/01/2024", "not a date", 20240115, "2024-13-45"])
    def test_invalid_dates_are_absent(self, value):
        assert to_date(value) is None

    def test_utc_suffix_becomes_naive_utc(self):
        assert to_datetime("2024-03-10T09:30:00Z") == datetime(2024, 3, 10, 9, 30)

    def test_offset_converted_to_utc(self):
        aware = datetime(2024, 3, 10, 15, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))
        assert to_datetime(aware) == datetime(2024, 3, 10, 9, 30)

    def test_date_becomes_midnight(self):
        assert to_datetime(date(2024, 3, 10)) == datetime(2024, 3, 10)

    def test_invalid_timestamp_is_absent(self):
        assert to_datetime("yesterday") is None


class TestToText:

    def test_trims(self):
        assert to_text("  Banking ") == "Banking"

    def test_blank_is_absent(self):
        assert to_text("   ") is None
        assert to_text(None) is None


class TestRounding:
    """Tests for the single rounding policy."""

    def test_money_rounds_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")
        assert round_money(Decimal("2.344")) == Decimal("2.34")

    def test_price_keeps_four_places(self):
        assert round_price(Decimal("1450.123456")) == Decimal("1450.1235")

    def test_percent_rounds_half_up(self):
        assert round_percent(Decimal("3.445")) == Decimal("3.45")

    def test_percent_of(self):
        assert percent_of(Decimal("500"), Decimal("14500")) == Decimal("3.45")

    def test_percent_of_zero_invested_is_zero(self):
        assert percent_of(Decimal("100"), Decimal("0")) == Decimal("0.00")

    def test_percent_of_negative_pl(self):
        assert percent_of(Decimal("-400"), Decimal("9000")) == Decimal("-4.44")

    def test_wide_values_round_without_error(self):
        assert round_money(Decimal("1e27")) == Decimal("1e27")
        assert round_price(Decimal("8.1e29")) == Decimal("810000000000000000000000000000.0000")


class TestHoldingPeriod:
    """Tests for the holding period value."""

    def test_between_dates(self):
        period = HoldingPeriod.between(date(2024, 1, 1), date(2024, 1, 11))
        assert period.days == 10
        assert period.available is True

    def test_unavailable_serialises_as_na(self):
        period = HoldingPeriod.unavailable()
        assert period.available is False
        assert period.to_json() == "N/A"
        assert str(period) == "N/A"

    def test_available_serialises_as_day_count(self):
        assert HoldingPeriod(days=10).to_json() == 10
        assert str(HoldingPeriod(days=10)) == "10"

    @pytest.mark.parametrize("value,days", [
        (10, 10),
        ("10", 10),
        ("15 days", 15),
        ("1 day", 1),
        (12.0, 12),
    ])
    def test_parse_day_counts(self, value, days):
        assert HoldingPeriod.parse(value) == HoldingPeriod(days=days)

    @pytest.mark.parametrize("value", [None, "N/A", "", "about a month", True])
    def test_parse_rejects_non_counts(self, value):
        assert HoldingPeriod.parse(value) is None

    @pytest.mark.parametrize("value", ["N/A", " n/a ", HoldingPeriod.unavailable()])
    def test_marks_unavailable(self, value):
        assert HoldingPeriod.marks_unavailable(value) is True

    @pytest.mark.parametrize("value", [None, "", 10, "10 days", HoldingPeriod(days=3)])
    def test_counts_and_absence_do_not_mark_unavailable(self, value):
        assert HoldingPeriod.marks_unavailable(value) is False

    def test_parse_round_trips_str(self):
        period = HoldingPeriod(days=42)
        assert HoldingPeriod.parse(str(period)) == period
