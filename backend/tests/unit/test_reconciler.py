"""
Unit Tests - Derived-Field Reconciler
Alias resolution, computed defaults and derived-field consistency.
"""
import pytest
from datetime import date, datetime
from decimal import Decimal

from stock_tracker.core.reconciliation import (
    HoldingPeriod,
    reconcile_closed_position,
    reconcile_position,
    reconcile_watchlist_entry,
    rederive_closed_position,
    resolve_identity,
)


TODAY = date(2024, 3, 11)
NOW = datetime(2024, 3, 11, 10, 0, 0)


# ============================================================
# Identity
# ============================================================

class TestIdentity:
    """Tests for symbol resolution."""

    def test_ticker_takes_priority_over_symbol(self):
        assert resolve_identity({"ticker": "TCS", "symbol": "INFY"}) == "TCS"

    def test_falls_back_to_symbol(self):
        assert resolve_identity({"symbol": "INFY"}) == "INFY"

    def test_blank_ticker_falls_through(self):
        assert resolve_identity({"ticker": "   ", "symbol": "INFY"}) == "INFY"

    def test_value_is_trimmed(self):
        assert resolve_identity({"symbol": "  TCS  "}) == "TCS"

    @pytest.mark.parametrize("raw", [
        {},
        {"symbol": ""},
        {"symbol": "   "},
        {"ticker": None, "symbol": None},
        {"symbol": {"code": "TCS"}},
        {"symbol": 500325.5},
        {"symbol": True},
    ])
    def test_no_identity(self, raw):
        assert resolve_identity(raw) is None

    @pytest.mark.parametrize("code", [500325, 500325.0, Decimal("500325")])
    def test_numeric_code_taken_as_text(self, code):
        assert resolve_identity({"symbol": code}) == "500325"

    def test_numeric_code_record_is_kept(self):
        position = reconcile_position({"symbol": 532540, "buyPrice": 10, "quantity": 1}, today=TODAY, now=NOW)
        assert position.symbol == "532540"

    @pytest.mark.parametrize("reconcile", [
        reconcile_position,
        reconcile_watchlist_entry,
        reconcile_closed_position,
    ])
    def test_records_without_identity_are_rejected(self, reconcile):
        assert reconcile({"symbol": "", "buyPrice": 100, "quantity": 10}) is None


# ============================================================
# Positions
# ============================================================

class TestReconcilePosition:
    """Tests for open-position reconciliation."""

    def test_minimal_record(self):
        """symbol + buy price + quantity resolves to a consistent position."""
        position = reconcile_position(
            {"symbol": "TCS", "buy_price": 100, "quantity": 10}, today=TODAY, now=NOW
        )

        assert position.symbol == "TCS"
        assert position.name == "TCS Ltd"
        assert position.current_price == Decimal("100")
        assert position.invested == Decimal("1000.00")
        assert position.current_value == Decimal("1000.00")
        assert position.pl == Decimal("0.00")
        assert position.pl_percent == Decimal("0.00")
        assert position.purchase_date == TODAY
        assert position.last_updated == NOW
        assert position.day_change == Decimal("0")
        assert position.day_change_percent == Decimal("0")
        assert position.position_size == "Medium"
        assert position.target_price is None
        assert position.stop_loss is None

    def test_empty_record_defaults(self):
        position = reconcile_position({"ticker": "X"}, today=TODAY, now=NOW)

        assert position.buy_price == Decimal("0")
        assert position.quantity == 0
        assert position.invested == Decimal("0.00")
        assert position.pl_percent == Decimal("0.00")

    def test_camel_case_fields(self):
        position = reconcile_position(
            {
                "ticker": "TCS",
                "buyPrice": 3500,
                "currentPrice": 3800.5,
                "quantity": 10,
                "purchaseDate": "2024-01-15",
                "targetPrice": "4200",
                "stopLoss": 3300,
                "position": "Large",
            },
            today=TODAY,
            now=NOW,
        )

        assert position.invested == Decimal("35000.00")
        assert position.current_value == Decimal("38005.00")
        assert position.pl == Decimal("3005.00")
        assert position.pl_percent == Decimal("8.59")
        assert position.purchase_date == date(2024, 1, 15)
        assert position.target_price == Decimal("4200")
        assert position.stop_loss == Decimal("3300")
        assert position.position_size == "Large"

    def test_camel_case_wins_over_snake_case(self):
        position = reconcile_position(
            {"symbol": "A", "buyPrice": 10, "buy_price": 20, "quantity": 1}, today=TODAY, now=NOW
        )
        assert position.buy_price == Decimal("10")

    def test_invalid_value_falls_through_to_next_alias(self):
        position = reconcile_position(
            {"symbol": "A", "buyPrice": "n/a", "buy_price": 20, "quantity": 1}, today=TODAY, now=NOW
        )
        assert position.buy_price == Decimal("20")

    def test_invalid_value_falls_through_to_default(self):
        position = reconcile_position(
            {"symbol": "A", "buyPrice": 50, "currentPrice": "pending", "quantity": 2},
            today=TODAY,
            now=NOW,
        )
        assert position.current_price == Decimal("50")
        assert position.current_value == Decimal("100.00")

    def test_supplied_invested_and_value_are_trusted(self):
        position = reconcile_position(
            {"symbol": "A", "buyPrice": 10, "quantity": 10, "invested": 120, "currentValue": 150},
            today=TODAY,
            now=NOW,
        )
        assert position.invested == Decimal("120.00")
        assert position.current_value == Decimal("150.00")
        assert position.pl == Decimal("30.00")
        assert position.pl_percent == Decimal("25.00")

    def test_supplied_pl_is_recomputed(self):
        """Stale pl/plPercent from the client never survive."""
        position = reconcile_position(
            {"symbol": "A", "buyPrice": 10, "currentPrice": 12, "quantity": 10, "pl": 999, "plPercent": 50},
            today=TODAY,
            now=NOW,
        )
        assert position.pl == position.current_value - position.invested == Decimal("20.00")
        assert position.pl_percent == Decimal("20.00")

    def test_zero_invested_never_divides(self):
        position = reconcile_position(
            {"symbol": "FREE", "buyPrice": 0, "currentPrice": 5, "quantity": 10}, today=TODAY, now=NOW
        )
        assert position.pl == Decimal("50.00")
        assert position.pl_percent == Decimal("0.00")

    def test_fractional_quantity_truncated(self):
        position = reconcile_position({"symbol": "A", "buyPrice": 10, "quantity": "3.7"}, today=TODAY, now=NOW)
        assert position.quantity == 3

    def test_name_blank_uses_default(self):
        position = reconcile_position({"symbol": "A", "name": "  "}, today=TODAY, now=NOW)
        assert position.name == "A Ltd"

    def test_buy_date_alias_for_purchase_date(self):
        position = reconcile_position({"symbol": "A", "buyDate": "2024-02-01"}, today=TODAY, now=NOW)
        assert position.purchase_date == date(2024, 2, 1)

    def test_never_raises_on_garbage(self):
        position = reconcile_position(
            {"symbol": "A", "buyPrice": {"x": 1}, "quantity": [1], "purchaseDate": 42, "lastUpdated": object()},
            today=TODAY,
            now=NOW,
        )
        assert position.buy_price == Decimal("0")
        assert position.quantity == 0
        assert position.purchase_date == TODAY
        assert position.last_updated == NOW

    @pytest.mark.parametrize("raw", [
        {"symbol": "A", "buyPrice": 1e30, "quantity": 1},
        {"symbol": "A", "buyPrice": "1e25", "quantity": 1},
        {"symbol": "A", "buyPrice": 10, "quantity": 1e40},
        {"symbol": "A", "buyPrice": 10, "quantity": 1, "invested": "-1e20", "currentValue": 1e16},
    ])
    def test_out_of_range_values_are_absent(self, raw):
        position = reconcile_position(raw, today=TODAY, now=NOW)

        assert position.buy_price in (Decimal("0"), Decimal("10"))
        assert position.quantity in (0, 1)
        assert position.invested == position.buy_price * position.quantity

    def test_large_in_range_values_do_not_raise(self):
        position = reconcile_position(
            {"symbol": "A", "buyPrice": 9e14, "currentPrice": 9.5e14, "quantity": 9e14}, today=TODAY, now=NOW
        )
        assert position.invested == Decimal("810000000000000000000000000000.00")
        assert position.pl_percent == Decimal("5.56")

    def test_to_dict_shape(self):
        position = reconcile_position({"symbol": "TCS", "buyPrice": 100, "quantity": 10}, today=TODAY, now=NOW)
        data = position.to_dict()

        assert data["symbol"] == data["ticker"] == "TCS"
        assert data["invested"] == 1000.0
        assert data["purchaseDate"] == "2024-03-11"
        assert data["position"] == "Medium"

    def test_to_dict_reconciles_to_same_record(self):
        position = reconcile_position(
            {"symbol": "TCS", "buyPrice": 3500.5, "currentPrice": 3800.25, "quantity": 10},
            today=TODAY,
            now=NOW,
        )
        assert reconcile_position(position.to_dict(), today=TODAY, now=NOW) == position


# ============================================================
# Watchlist
# ============================================================

class TestReconcileWatchlistEntry:
    """Tests for watchlist reconciliation."""

    def test_defaults(self):
        entry = reconcile_watchlist_entry({"symbol": "WIPRO"}, today=TODAY, now=NOW)

        assert entry.name == "WIPRO Ltd"
        assert entry.sector == "Unknown"
        assert entry.added_date == TODAY
        assert entry.last_updated == NOW
        assert entry.current_price is None
        assert entry.day_change is None
        assert entry.notes is None

    def test_full_record(self):
        entry = reconcile_watchlist_entry(
            {
                "ticker": "HDFCBANK",
                "name": "HDFC Bank",
                "sector": "Banking",
                "currentPrice": "1510.5",
                "dayChange": -4.2,
                "dayChangePercent": -0.278,
                "targetPrice": 1700,
                "notes": "Wait for results",
                "addedDate": "2024-02-20",
            },
            today=TODAY,
            now=NOW,
        )

        assert entry.symbol == "HDFCBANK"
        assert entry.current_price == Decimal("1510.5")
        assert entry.day_change_percent == Decimal("-0.28")
        assert entry.added_date == date(2024, 2, 20)
        assert entry.notes == "Wait for results"


# ============================================================
# Closed positions
# ============================================================

class TestReconcileClosedPosition:
    """Tests for closed-position reconciliation."""

    def test_derived_fields(self):
        closed = reconcile_closed_position(
            {
                "symbol": "RELIANCE",
                "buyPrice": 2400,
                "sellPrice": 2650,
                "quantity": 5,
                "buyDate": "2024-01-01",
                "sellDate": "2024-01-11",
            },
            today=TODAY,
        )

        assert closed.invested == Decimal("12000.00")
        assert closed.realized == Decimal("13250.00")
        assert closed.pl == Decimal("1250.00")
        assert closed.pl_percent == Decimal("10.42")
        assert closed.holding_period == HoldingPeriod(days=10)

    def test_legacy_close_aliases(self):
        closed = reconcile_closed_position(
            {
                "ticker": "ITC",
                "buyPrice": 450,
                "closePrice": 430,
                "quantity": 20,
                "purchaseDate": "2023-12-01",
                "closedDate": "2024-02-15",
            },
            today=TODAY,
        )

        assert closed.sell_price == Decimal("430")
        assert closed.buy_date == date(2023, 12, 1)
        assert closed.sell_date == date(2024, 2, 15)
        assert closed.pl == Decimal("-400.00")
        assert closed.pl_percent == Decimal("-4.44")
        assert closed.holding_period.days == 76

    def test_sell_price_defaults_to_buy_price(self):
        closed = reconcile_closed_position({"symbol": "A", "buyPrice": 10, "quantity": 3}, today=TODAY)
        assert closed.sell_price == Decimal("10")
        assert closed.pl == Decimal("0.00")

    def test_missing_date_makes_holding_period_unavailable(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyPrice": 10, "quantity": 3, "buyDate": "2024-01-01"}, today=TODAY
        )
        assert closed.sell_date == TODAY
        assert closed.holding_period.available is False
        assert closed.to_dict()["holdingPeriod"] == "N/A"

    def test_invalid_date_makes_holding_period_unavailable(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyDate": "2024-01-01", "sellDate": "soon"}, today=TODAY
        )
        assert closed.holding_period.available is False

    def test_supplied_holding_period_is_used(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyDate": "2024-01-01", "sellDate": "2024-01-11", "holdingPeriod": "15 days"},
            today=TODAY,
        )
        assert closed.holding_period.days == 15

    def test_supplied_na_holding_period_kept(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyDate": "2024-01-01", "sellDate": "2024-01-11", "holdingPeriod": "N/A"},
            today=TODAY,
        )
        assert closed.holding_period.available is False

    def test_resubmitted_record_without_dates_stays_unavailable(self):
        closed = reconcile_closed_position({"symbol": "A", "buyPrice": 10, "quantity": 3}, today=TODAY)

        again = reconcile_closed_position(closed.to_dict(), today=date(2024, 6, 1))

        assert again.holding_period.available is False
        assert again.buy_date == again.sell_date == TODAY

    def test_close_aliases_take_priority(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyPrice": 10, "closePrice": 13, "sellPrice": 12,
             "quantity": 2, "closeValue": 30, "realized": 24},
            today=TODAY,
        )
        assert closed.sell_price == Decimal("13")
        assert closed.realized == Decimal("30.00")

    def test_current_price_used_as_sell_price(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyPrice": 10, "currentPrice": 14, "quantity": 2}, today=TODAY
        )
        assert closed.sell_price == Decimal("14")
        assert closed.realized == Decimal("28.00")

    def test_supplied_final_pl_ignored(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyPrice": 10, "sellPrice": 11, "quantity": 10, "finalPL": 5000},
            today=TODAY,
        )
        assert closed.pl == Decimal("10.00")

    def test_to_dict_carries_legacy_names(self):
        closed = reconcile_closed_position(
            {"symbol": "A", "buyPrice": 10, "sellPrice": 11, "quantity": 10}, today=TODAY
        )
        data = closed.to_dict()

        assert data["closePrice"] == data["sellPrice"] == 11.0
        assert data["closeValue"] == data["realized"] == 110.0
        assert data["finalPL"] == data["pl"] == 10.0
        assert data["closedDate"] == data["sellDate"] == "2024-03-11"


class TestRederiveClosedPosition:
    """Tests for read-time recomputation."""

    def test_stale_derived_values_ignored(self):
        closed = rederive_closed_position(
            {
                "symbol": "A",
                "buyPrice": 100,
                "sellPrice": 120,
                "quantity": 10,
                "invested": 1,
                "realized": 2,
                "closeValue": 3,
                "holdingPeriod": 999,
                "buyDate": "2024-01-01",
                "sellDate": "2024-01-31",
            },
            today=TODAY,
        )

        assert closed.invested == Decimal("1000.00")
        assert closed.realized == Decimal("1200.00")
        assert closed.pl == Decimal("200.00")
        assert closed.holding_period.days == 30

    def test_unavailable_holding_period_survives(self):
        stored = reconcile_closed_position({"symbol": "X", "sellDate": "2024-01-11"}, today=TODAY)

        closed = rederive_closed_position(stored.to_dict(), today=date(2026, 10, 19))

        assert closed.holding_period.available is False
        assert closed.to_dict()["holdingPeriod"] == "N/A"

    def test_input_not_mutated(self):
        raw = {"symbol": "A", "invested": 1}
        rederive_closed_position(raw, today=TODAY)
        assert raw == {"symbol": "A", "invested": 1}
