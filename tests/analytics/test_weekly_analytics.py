"""Tests for week-based aggregations."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from worklog_cli.analytics import (
    WEEKDAY_LABELS,
    get_start_of_week,
    get_week_number,
    get_weekly_distribution,
)

from conftest import make_entry, make_project


class TestWeekNumber:
    # March 2024 starts on a Friday
    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2024, 3, 1), 1),
            (date(2024, 3, 2), 1),
            (date(2024, 3, 3), 2),
            (date(2024, 3, 31), 6),
        ],
    )
    def test_sunday_first_month_relative(self, day, expected):
        assert get_week_number(day) == expected

    def test_month_starting_on_sunday(self):
        # September 2024 starts on a Sunday
        assert get_week_number(date(2024, 9, 7)) == 1
        assert get_week_number(date(2024, 9, 8)) == 2


class TestStartOfWeek:
    def test_returns_monday_midnight(self):
        assert get_start_of_week(datetime(2024, 3, 14, 16, 45)) == datetime(2024, 3, 11)

    def test_sunday_belongs_to_previous_monday(self):
        assert get_start_of_week(date(2024, 3, 17)) == datetime(2024, 3, 11)


class TestWeeklyDistribution:
    def test_seven_labelled_buckets(self):
        web = make_project("Web", project_id="web")
        entries = [
            make_entry("web", datetime(2024, 3, 11, 9, 0), minutes=60),
            make_entry("web", datetime(2024, 3, 13, 9, 0), minutes=150),
        ]

        result = get_weekly_distribution(entries, [web], date(2024, 3, 11))

        assert [bucket["date"] for bucket in result] == list(WEEKDAY_LABELS)
        assert result[0]["Web"] == 1.0
        assert result[1]["Web"] == 0.0
        assert result[2]["Web"] == 2.5

    def test_custom_labels(self):
        labels = ["11", "12", "13", "14", "15", "16", "17"]
        result = get_weekly_distribution([], [], date(2024, 3, 11), labels)
        assert result == [{"date": label} for label in labels]
