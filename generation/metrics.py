"""
Performance metrics for a generation job (stage durations and their share of the total).
"""

from typing import Any, Dict, Optional

STAGES = ("search", "research", "writer")


def format_duration(duration_ms: Optional[int]) -> str:
    """Human-readable duration, e.g. 45s, 2m 5s, 1h 3m."""
    if not duration_ms:
        return "--"

    seconds = round(duration_ms / 1000)
    if seconds < 60:
        return f"{seconds}s"

    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {seconds}s" if seconds else f"{minutes}m"

    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m" if minutes else f"{hours}h"


def phase_percentages(job: Dict[str, Any]) -> Dict[str, int]:
    total = job.get("total_duration_ms")
    if not total:
        return {stage: 0 for stage in STAGES}
    return {
        stage: round((job.get(f"{stage}_duration_ms") or 0) / total * 100)
        for stage in STAGES
    }


def performance_summary(job: Dict[str, Any]) -> Dict[str, Any]:
    summary = {
        "total_time": format_duration(job.get("total_duration_ms")),
        "percentages": phase_percentages(job),
    }
    for stage in STAGES:
        summary[f"{stage}_time"] = format_duration(job.get(f"{stage}_duration_ms"))
    return summary
