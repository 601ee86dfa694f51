"""Analytics engine: pure functions over time entries and projects.

Nothing here keeps state or mutates its inputs; calling any function twice
with the same arguments gives the same result.
"""

from worklog_cli.utils.dates import is_within_date_range

from .aggregations import (
    NOT_FOUND_PROJECT_NAME,
    ProjectHours,
    calculate_project_hours,
    get_legacy_project_distribution,
    get_most_active_project,
    get_project_distribution,
)
from .daily import (
    get_average_work_session,
    get_daily_project_hours,
    get_daily_work_hours,
    get_longest_work_session,
)
from .heatmap import (
    HeatmapDay,
    HeatmapWeek,
    calculate_heatmap_level,
    generate_heatmap_data,
    get_rolling_12_month_range,
)
from .monthly import (
    MonthlyProgress,
    WeekHours,
    calculate_monthly_progress,
    calculate_monthly_target_hours,
    calculate_remaining_working_days,
    calculate_total_monthly_target,
    get_monthly_distribution,
    get_previous_month_project_distribution,
    get_week_date_range,
    get_weeks_in_month,
)
from .predictions import (
    calculate_daily_average_hours,
    calculate_recommended_daily_hours,
    predict_completion_date,
)
from .weekly import (
    WEEKDAY_LABELS,
    get_start_of_week,
    get_week_number,
    get_weekly_distribution,
)

__all__ = [
    "NOT_FOUND_PROJECT_NAME",
    "WEEKDAY_LABELS",
    "HeatmapDay",
    "HeatmapWeek",
    "MonthlyProgress",
    "ProjectHours",
    "WeekHours",
    "calculate_daily_average_hours",
    "calculate_heatmap_level",
    "calculate_monthly_progress",
    "calculate_monthly_target_hours",
    "calculate_project_hours",
    "calculate_recommended_daily_hours",
    "calculate_remaining_working_days",
    "calculate_total_monthly_target",
    "generate_heatmap_data",
    "get_average_work_session",
    "get_daily_project_hours",
    "get_daily_work_hours",
    "get_legacy_project_distribution",
    "get_longest_work_session",
    "get_monthly_distribution",
    "get_most_active_project",
    "get_previous_month_project_distribution",
    "get_project_distribution",
    "get_rolling_12_month_range",
    "get_start_of_week",
    "get_week_date_range",
    "get_week_number",
    "get_weekly_distribution",
    "get_weeks_in_month",
    "is_within_date_range",
    "predict_completion_date",
]
