"""
summary_service.py - Status summary for dashboard tiles
Single responsibility: count issues per known status.
"""
from issuedesk.config import HIGH_RISK_THRESHOLD
from issuedesk.domain.models import Issue
from issuedesk.domain.reference import STATUS_FLOW


def count_by_status(issues: list[Issue]) -> dict[str, int]:
    """Unknown statuses are ignored, not reported."""
    counts = {status: 0 for status in STATUS_FLOW}
    for issue in issues:
        if issue.status in counts:
            counts[issue.status] += 1
    return counts


def merge_server_counts(raw: dict | None) -> dict[str, int] | None:
    """Keep only known statuses from a server-supplied aggregate."""
    if not raw:
        return None
    return {status: int(raw.get(status) or 0) for status in STATUS_FLOW}


def is_high_risk(score: int) -> bool:
    return score > HIGH_RISK_THRESHOLD
