from __future__ import annotations

from datetime import date

from lucid.models import LearningRecord
from lucid.services import LocalAnalyticsService
from lucid.services.analytics import streak_days


def _record(day: str, minutes: int = 10, **fields) -> LearningRecord:
    return LearningRecord(node_id=fields.pop("node_id", "n1"), duration=minutes, date=f"{day}T12:00:00Z", **fields)


def test_streak_counts_back_from_today_or_yesterday() -> None:
    records = [_record("2025-03-01"), _record("2025-02-28"), _record("2025-02-26")]

    assert streak_days(records, date(2025, 3, 1)) == 2
    assert streak_days(records, date(2025, 3, 2)) == 2
    assert streak_days(records, date(2025, 3, 3)) == 0
    assert streak_days([], date(2025, 3, 1)) == 0


def test_report_totals() -> None:
    service = LocalAnalyticsService(today=lambda: date(2025, 3, 1))
    records = [
        _record("2025-03-01", 30, topic="Graphs", focus_level=80, interruptions=1),
        _record("2025-03-01", 15, topic="Graphs", node_id="n2", focus_level=60),
        _record("2025-02-20", 5, focus_level=100),
    ]

    report = service.build_report(records)

    assert report.total_sessions == 3
    assert report.total_minutes == 50
    assert report.average_focus == 80
    assert report.total_interruptions == 1
    assert report.streak_days == 1
    assert report.minutes_by_topic == {"Graphs": 45, "Untitled": 5}
    assert report.most_studied_nodes == ["n1", "n2"]


def test_stats_group_by_day_week_and_month() -> None:
    service = LocalAnalyticsService()
    records = [
        _record("2025-03-03", 20, action="create"),
        _record("2025-03-01", 10, action="review"),
        _record("2025-03-03", 5),
    ]

    stats = service.build_stats(records)

    assert [(d.date, d.duration) for d in stats.daily] == [("2025-03-01", 10), ("2025-03-03", 25)]
    assert stats.daily[0].nodes_reviewed == 1
    assert [(w.week, w.sessions) for w in stats.weekly] == [("2025-W09", 1), ("2025-W10", 2)]
    assert stats.monthly[0].month == "2025-03"
    assert stats.monthly[0].knowledge_growth == 1
