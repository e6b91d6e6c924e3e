"""
Learning analytics: reports and daily/weekly/monthly aggregates
"""
from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional

from loguru import logger

from lucid.models import (
    DailyStat,
    LearningRecord,
    LearningReport,
    LearningStats,
    MonthlyStat,
    ServiceResponse,
    WeeklyStat,
)
from lucid.services.base import describe_error

TOP_NODES = 5


def streak_days(records: List[LearningRecord], today: Optional[date] = None) -> int:
    """
    Count consecutive study days ending today (or yesterday)

    A streak that last saw activity yesterday is still alive.
    """
    days = {record.date.date() for record in records}
    if not days:
        return 0

    cursor = today or max(days)
    if cursor not in days:
        cursor -= timedelta(days=1)

    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def _average(values: List[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


class LocalAnalyticsService:
    def __init__(self, today=None):
        self.today = today or date.today

    def build_report(self, records: List[LearningRecord]) -> LearningReport:
        minutes_by_topic: Dict[str, int] = defaultdict(int)
        minutes_by_node: Counter = Counter()
        for record in records:
            minutes_by_topic[record.topic or "Untitled"] += record.duration
            minutes_by_node[record.node_id] += record.duration

        return LearningReport(
            total_sessions=len(records),
            total_minutes=sum(record.duration for record in records),
            average_focus=_average([record.focus_level for record in records]),
            total_interruptions=sum(record.interruptions for record in records),
            streak_days=streak_days(records, self.today()),
            minutes_by_topic=dict(minutes_by_topic),
            most_studied_nodes=[node_id for node_id, _ in minutes_by_node.most_common(TOP_NODES)],
        )

    def build_stats(self, records: List[LearningRecord]) -> LearningStats:
        daily: Dict[str, List[LearningRecord]] = defaultdict(list)
        weekly: Dict[str, List[LearningRecord]] = defaultdict(list)
        monthly: Dict[str, List[LearningRecord]] = defaultdict(list)

        for record in sorted(records, key=lambda r: r.date):
            day = record.date.date()
            year, week, _ = day.isocalendar()
            daily[day.isoformat()].append(record)
            weekly[f"{year}-W{week:02d}"].append(record)
            monthly[day.strftime("%Y-%m")].append(record)

        return LearningStats(
            daily=[
                DailyStat(
                    date=key,
                    duration=sum(r.duration for r in items),
                    nodes_created=sum(1 for r in items if r.action == "create"),
                    nodes_reviewed=sum(1 for r in items if r.action == "review"),
                    focus_score=_average([r.focus_level for r in items]),
                )
                for key, items in daily.items()
            ],
            weekly=[
                WeeklyStat(
                    week=key,
                    total_time=sum(r.duration for r in items),
                    avg_focus=_average([r.focus_level for r in items]),
                    sessions=len(items),
                )
                for key, items in weekly.items()
            ],
            monthly=[
                MonthlyStat(
                    month=key,
                    total_time=sum(r.duration for r in items),
                    sessions=len(items),
                    knowledge_growth=sum(1 for r in items if r.action == "create"),
                )
                for key, items in monthly.items()
            ],
        )

    async def generate_report(self, records: List[LearningRecord]) -> ServiceResponse:
        try:
            return ServiceResponse.ok(self.build_report(records))
        except Exception as e:
            logger.exception(f"Error generating learning report: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to generate report"))

    async def get_stats(self, records: List[LearningRecord]) -> ServiceResponse:
        try:
            return ServiceResponse.ok(self.build_stats(records))
        except Exception as e:
            logger.exception(f"Error computing learning stats: {e}")
            return ServiceResponse.fail(describe_error(e, "Failed to compute stats"))
