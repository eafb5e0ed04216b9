"""Tests for display formatting of summary metrics and record values."""

from decimal import Decimal

import pytest

from farmpro.formatting import (
    as_number,
    build_summary_lines,
    format_value,
    metric_label,
    ordered_summary_keys,
    plain_value,
    round_half_away,
)
from farmpro.report_types import Category


class TestFormatValue:
    """Tests for format_value."""

    def test_currency_integral(self):
        assert format_value("grossRevenue", 150.0) == "KSh 150"

    def test_currency_fractional(self):
        assert format_value("grossRevenue", 150.5) == "KSh 150.50"

    def test_currency_negative_amount(self):
        assert format_value("amount", -30.0) == "KSh -30"

    def test_currency_key_is_case_insensitive(self):
        assert format_value("TotalAmount", Decimal("99.999")) == "KSh 100.00"

    @pytest.mark.parametrize("value,expected", [(3, "3"), (2.5, "3"), (-2.5, "-3"), (2.4, "2")])
    def test_counts_round_half_away_from_zero(self, value, expected):
        assert format_value("transactions", value) == expected

    def test_plain_numeric_keys(self):
        assert format_value("milkLiters", 42.5) == "42.50"
        assert format_value("woolKg", 3.0) == "3"

    def test_unknown_key_number(self):
        assert format_value("somethingElse", 7.25) == "7.25"

    def test_unknown_key_text(self):
        assert format_value("note", "n/a") == "n/a"

    def test_boolean_is_not_a_number(self):
        assert format_value("amount", True) == "true"


class TestHelpers:
    """Tests for numeric coercion and plain rendering."""

    def test_as_number(self):
        assert as_number(3) == 3.0
        assert as_number(Decimal("1.5")) == 1.5
        assert as_number(False) is None
        assert as_number("12") is None

    def test_round_half_away(self):
        assert round_half_away(0.5) == 1
        assert round_half_away(-0.5) == -1
        assert round_half_away(1.49) == 1

    def test_plain_value(self):
        assert plain_value(None) == ""
        assert plain_value(100.0) == "100"
        assert plain_value(86.21) == "86.21"
        assert plain_value(False) == "false"
        assert plain_value("Milk") == "Milk"


class TestSummaryOrdering:
    """Tests for summary key ordering and labels."""

    def test_priority_then_alphabetical(self):
        keys = ["zeta", "profit", "alpha", "grossRevenue"]
        assert ordered_summary_keys(Category.FINANCIAL, keys) == ["grossRevenue", "profit", "alpha", "zeta"]

    def test_health_priority(self):
        assert ordered_summary_keys("Health", ["sick", "healthy", "attention"]) == ["healthy", "attention", "sick"]

    def test_metric_label(self):
        assert metric_label("milkLiters") == "Milk (Liters)"
        assert metric_label("customKey") == "customKey"
        assert metric_label("") == "Metric"

    def test_build_summary_lines(self, make_report):
        report = make_report(category=Category.SALES, summary={
            "transactions": 2,
            "grossRevenue": 150.0,
            "netRevenue": 150.0,
            "vatCollected": 0,
            "totalRevenue": 150.0,
        })
        assert build_summary_lines(report) == [
            "Gross Revenue: KSh 150",
            "Net Revenue: KSh 150",
            "Total Revenue: KSh 150",
            "VAT Collected: KSh 0",
            "Transactions: 2",
        ]
