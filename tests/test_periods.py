"""Tests for period math."""

from datetime import date

import pytest

from multisites.core.periods import InvalidPeriod, PeriodMath, PriorPeriod

math = PeriodMath(today=date(2024, 1, 16))


class TestPriorPeriod:
    def test_previous_day(self):
        assert math.prior_period("day", "2024-01-15") == PriorPeriod(
            date="2024-01-14", last_period=date(2024, 1, 14)
        )

    def test_previous_week(self):
        assert math.prior_period("week", "2024-01-15").date == "2024-01-08"

    def test_previous_month_clamps_to_month_end(self):
        assert math.prior_period("month", "2024-03-31").date == "2024-02-29"

    def test_previous_year(self):
        assert math.prior_period("year", "2024-02-29").date == "2023-02-28"

    def test_keywords(self):
        assert math.prior_period("day", "today").date == "2024-01-15"
        assert math.prior_period("day", "yesterday").date == "2024-01-14"

    def test_date_list_shifts_both_ends(self):
        prior = math.prior_period("day", "2024-01-14,2024-01-15")
        assert prior.date == "2024-01-13,2024-01-14"
        assert prior.last_period is None

    def test_no_prior_for_range_period(self):
        assert math.prior_period("range", "2024-01-01,2024-01-15") is None

    def test_no_prior_for_last_n(self):
        assert math.prior_period("day", "last7") is None
        assert math.prior_period("week", "previous3") is None

    def test_unknown_period(self):
        with pytest.raises(InvalidPeriod):
            math.prior_period("decade", "2024-01-15")

    def test_invalid_date(self):
        with pytest.raises(InvalidPeriod):
            math.prior_period("day", "15/01/2024")


class TestExpand:
    def test_single_day(self):
        assert math.expand("day", "2024-01-15") == ["2024-01-15"]

    def test_week_starts_on_monday(self):
        assert math.expand("week", "2024-01-17") == ["2024-01-15"]

    def test_month_and_year_start(self):
        assert math.expand("month", "2024-01-17") == ["2024-01-01"]
        assert math.expand("year", "2024-06-30") == ["2024-01-01"]

    def test_comma_list(self):
        assert math.expand("day", "2024-01-13,2024-01-15") == [
            "2024-01-13",
            "2024-01-14",
            "2024-01-15",
        ]

    def test_last_n_ends_today(self):
        assert math.expand("day", "last3") == ["2024-01-14", "2024-01-15", "2024-01-16"]

    def test_previous_n_ends_before_today(self):
        assert math.expand("month", "previous2") == ["2023-11-01", "2023-12-01"]

    def test_range_is_one_archive(self):
        assert math.expand("range", "2024-01-01,2024-01-15") == ["2024-01-01,2024-01-15"]

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidPeriod):
            math.expand("day", "2024-01-15,2024-01-01")


class TestIsMultiPeriod:
    def test_single_date(self):
        assert not math.is_multi_period("day", "2024-01-15")

    def test_lists_and_last_n(self):
        assert math.is_multi_period("day", "2024-01-14,2024-01-15")
        assert math.is_multi_period("week", "last4")

    def test_range_is_one_period(self):
        assert not math.is_multi_period("range", "2024-01-01,2024-01-15")
