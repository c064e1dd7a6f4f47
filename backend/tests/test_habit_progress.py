from datetime import datetime, timedelta, timezone

from habit_hub.services.habit_progress import HabitProgressCalculator, ReportEntry, dashboard_summary
from habit_hub.services.report_values import normalize_report_value

T0 = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)


def entries(habit_type, *raws):
    return [
        ReportEntry(id=str(i), value=normalize_report_value(habit_type, raw), reported_at=T0 + timedelta(minutes=i))
        for i, raw in enumerate(raws)
    ]


def test_number_habit_sums_values():
    result = HabitProgressCalculator.evaluate("number", "8 glasses", entries("number", "3", "5"))
    assert result.progress == 8.0
    assert result.target == 8
    assert result.completed is True
    assert result.last_reported_value == "5"


def test_non_numeric_report_counts_zero():
    result = HabitProgressCalculator.evaluate("number", "8 glasses", entries("number", "3", "lots"))
    assert result.progress == 3.0
    assert result.completed is False
    assert result.last_reported_value == "lots"


def test_duration_habit_sums_minutes():
    result = HabitProgressCalculator.evaluate("duration", "30", entries("duration", 10, 15))
    assert result.progress == 25.0
    assert result.completed is False
    result = HabitProgressCalculator.evaluate("duration", "30", entries("duration", 10, 15, 5))
    assert result.completed is True


def test_boolean_habit_counts_reports():
    assert HabitProgressCalculator.evaluate("boolean", "Every day", []).completed is False
    result = HabitProgressCalculator.evaluate("boolean", "Every day", entries("boolean", True))
    assert result.progress == 1
    assert result.target == 1
    assert result.completed is True


def test_time_and_options_count_reports():
    result = HabitProgressCalculator.evaluate("time", "07:00", entries("time", "07:10", "06:55"))
    assert result.progress == 2
    assert result.completed is True
    assert result.last_reported_value == "06:55"

    result = HabitProgressCalculator.evaluate("options", "", entries("options", "Salad"))
    assert result.last_reported_value == "Salad"


def test_goal_without_number_defaults_to_one():
    result = HabitProgressCalculator.evaluate("number", "as much as possible", entries("number", 1))
    assert result.target == 1
    assert result.completed is True


def test_last_value_follows_report_time_not_input_order():
    reports = entries("number", 1, 2)
    result = HabitProgressCalculator.evaluate("number", "5", list(reversed(reports)))
    assert result.last_reported_value == "2"


def test_no_reports_means_no_progress():
    result = HabitProgressCalculator.evaluate("duration", "30", [])
    assert result.progress == 0
    assert result.completed is False
    assert result.last_reported_value is None


def test_evaluate_is_repeatable():
    reports = entries("number", 2, 3)
    assert HabitProgressCalculator.evaluate("number", "5", reports) == HabitProgressCalculator.evaluate(
        "number", "5", reports
    )


def test_progress_percentage():
    assert HabitProgressCalculator.progress_percentage("number", "8 glasses", 4) == 50.0
    assert HabitProgressCalculator.progress_percentage("number", "8 glasses", 20) == 100.0
    assert HabitProgressCalculator.progress_percentage("number", "", 3) == 100.0
    assert HabitProgressCalculator.progress_percentage("boolean", "", 1) == 100.0
    assert HabitProgressCalculator.progress_percentage("boolean", "", 0) == 0.0


def test_status_text():
    assert HabitProgressCalculator.status_text("number", "8 glasses", 3.0, False, "3") == "Progress: 3 / 8 glasses"
    assert HabitProgressCalculator.status_text("duration", "90", 45.0, False, "45") == "Progress: 45m / 1h 30m"
    assert HabitProgressCalculator.status_text("boolean", "", 1, True, "true") == "Completed"
    assert HabitProgressCalculator.status_text("time", "", 0, False, None) == "Log a time"
    assert HabitProgressCalculator.status_text("options", "", 1, True, "Salad") == "Last choice: Salad"


class _View:
    def __init__(self, completed):
        self.completed = completed


def test_dashboard_summary():
    summary = dashboard_summary([_View(True), _View(False), _View(False)])
    assert summary == {"completed_count": 1, "total_count": 3, "completion_rate": 33}
    assert dashboard_summary([_View(True), _View(True), _View(False)])["completion_rate"] == 67
    assert dashboard_summary([])["completion_rate"] == 0
