"""Tests for completion forecasts and pace helpers."""

from __future__ import annotations

from datetime import date, datetime

from worklog_cli.analytics import (
    calculate_daily_average_hours,
    calculate_recommended_daily_hours,
    predict_completion_date,
)

from conftest import make_entry

TODAY = date(2024, 3, 12)


class TestPredictCompletionDate:
    def test_projects_forward_by_whole_days(self):
        assert predict_completion_date(10, 20, 2, today=TODAY) == date(2024, 3, 17)

    def test_partial_day_rounds_up(self):
        assert predict_completion_date(10, 20, 3, today=TODAY) == date(2024, 3, 16)

    def test_target_already_met(self):
        assert predict_completion_date(20, 20, 2, today=TODAY) is None

    def test_no_pace(self):
        assert predict_completion_date(0, 20, 0, today=TODAY) is None


class TestRecommendedDailyHours:
    def test_spreads_over_remaining_days_including_today(self):
        # 20 days left in March counting the 12th
        assert calculate_recommended_daily_hours(10, 40, today=TODAY) == 1.5

    def test_target_met(self):
        assert calculate_recommended_daily_hours(50, 40, today=TODAY) == 0.0


class TestDailyAverageHours:
    def test_divides_by_days_worked(self):
        entries = [
            make_entry("web", datetime(2024, 3, 1, 9, 0), minutes=120),
            make_entry("web", datetime(2024, 3, 1, 14, 0), minutes=60),
            make_entry("web", datetime(2024, 3, 5, 9, 0), minutes=180),
            make_entry("web", datetime(2024, 2, 29, 9, 0), minutes=600),
            make_entry("api", datetime(2024, 3, 6, 9, 0), minutes=600),
        ]
        assert calculate_daily_average_hours(entries, "web", today=TODAY) == 3.0

    def test_no_entries(self):
        assert calculate_daily_average_hours([], "web", today=TODAY) == 0.0
