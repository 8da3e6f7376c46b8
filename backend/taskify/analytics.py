"""Productivity figures derived from a workspace's tasks."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Iterable, Optional

from taskify.storage.records import TASK_PRIORITIES, Task, TaskStats

UNCATEGORIZED = "Uncategorized"


def task_stats(tasks: Iterable[Task]) -> TaskStats:
    tasks = list(tasks)
    return TaskStats(
        total=len(tasks),
        pending=sum(1 for t in tasks if t.status == "pending"),
        in_progress=sum(1 for t in tasks if t.status == "in-progress"),
        completed=sum(1 for t in tasks if t.status == "completed"),
    )


def completion_rate(stats: TaskStats) -> int:
    if stats.total == 0:
        return 0
    return round(stats.completed / stats.total * 100)


def priority_breakdown(tasks: Iterable[Task]) -> dict[str, int]:
    counts = {p: 0 for p in reversed(TASK_PRIORITIES)}
    for t in tasks:
        if t.priority in counts:
            counts[t.priority] += 1
    return counts


def _day(stamp: Optional[str]) -> str:
    return (stamp or "")[:10]


def productivity_trend(tasks: Iterable[Task], today: Optional[date] = None, days: int = 7) -> list[dict[str, Any]]:
    """Tasks created and completed per day over the last `days` days, oldest first.

    A task counts as completed on the day of its last update while its status
    is "completed".
    """
    tasks = list(tasks)
    today = today or datetime.now(timezone.utc).date()
    out = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        out.append({
            "date": day,
            "created": sum(1 for t in tasks if _day(t.created_at) == day),
            "completed": sum(1 for t in tasks if t.status == "completed" and _day(t.updated_at) == day),
        })
    return out


def category_distribution(tasks: Iterable[Task]) -> list[dict[str, Any]]:
    counts: dict[str, int] = {}
    for t in tasks:
        category = t.category or UNCATEGORIZED
        counts[category] = counts.get(category, 0) + 1
    return [{"category": c, "count": n} for c, n in counts.items()]


def build_report(tasks: Iterable[Task], today: Optional[date] = None, days: int = 7) -> dict[str, Any]:
    tasks = list(tasks)
    stats = task_stats(tasks)
    return {
        "stats": stats.to_dict(),
        "completion_rate": completion_rate(stats),
        "priorities": priority_breakdown(tasks),
        "trend": productivity_trend(tasks, today=today, days=days),
        "categories": category_distribution(tasks),
    }
