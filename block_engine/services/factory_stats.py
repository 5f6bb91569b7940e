"""
Aggregate statistics over recent factory_logs rows.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence


RECENT_LOGS_LIMIT = 100
RECENT_LOGS_SHOWN = 10


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def summarize_factory_logs(
    logs: Sequence[Dict[str, Any]],
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Summary of factory runs.

    Args:
        logs: factory_logs rows, newest first
        now: Reference time for the 24h window (defaults to current UTC time)

    Returns:
        Totals, success rate, mean generation time, last-24h count, the last
        generation and the most recent rows
    """
    now = now or datetime.now(timezone.utc)
    logs = list(logs)

    total = len(logs)
    successful = sum(1 for log in logs if log.get("success"))
    success_rate = (successful / total) * 100 if total else 0.0
    avg_time = (
        sum(log.get("generation_time_ms") or 0 for log in logs) / total
        if total else 0.0
    )

    day_ago = now - timedelta(hours=24)
    recent: List[Dict[str, Any]] = []
    for log in logs:
        created_at = _parse_timestamp(log.get("created_at"))
        if created_at and created_at > day_ago:
            recent.append(log)

    last = logs[0] if logs else None

    return {
        "total_blocks_generated": total,
        "successful": successful,
        "failed": total - successful,
        "success_rate_percent": round(success_rate, 2),
        "avg_generation_time_ms": round(avg_time),
        "blocks_last_24h": len(recent),
        "last_generation": {
            "category": last.get("category"),
            "vibe": last.get("vibe"),
            "success": last.get("success"),
            "created_at": last.get("created_at"),
        } if last else None,
        "recent_logs": logs[:RECENT_LOGS_SHOWN],
    }
