"""
export_service.py - CSV export of the filtered result set
Single responsibility: turn issues into delimited report rows.
"""
import csv
import io
from datetime import date

from issuedesk.domain.models import Issue
from issuedesk.domain.reference import ReferenceData
from issuedesk.services.draft_service import agreed_resolution
from issuedesk.utils.time import format_datetime

HEADERS: list[str] = [
    "ID",
    "Title",
    "Status",
    "Stage",
    "Project",
    "Environment",
    "Issue Type",
    "Reported By",
    "Reported At",
    "Risk Score",
    "Risks",
    "Assignee",
    "Context",
    "Problem Statement",
    "Evidence",
    "Root Cause Category",
    "Root Cause Detail",
    "Latest Escalation Layer",
    "Latest Escalation Status",
    "Agreed Resolution (Solution)",
    "Agreed Resolution (Effort)",
    "Closed At",
]


def _name(ref) -> str:
    return ref.display_name if ref else ""


def _effort(value) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def export_row(issue: Issue, reference: ReferenceData | None = None) -> list[str]:
    reference = reference or ReferenceData()
    latest = issue.escalations[-1] if issue.escalations else None
    agreed = agreed_resolution(issue)
    return [
        issue.id,
        issue.title,
        issue.status,
        _name(issue.stage),
        _name(issue.project),
        issue.environment,
        _name(issue.issue_type),
        _name(issue.reported_by),
        format_datetime(issue.reported_at),
        str(issue.risk_score),
        ", ".join(reference.name_of("risks", r) for r in issue.risks),
        _name(issue.assignee),
        issue.context,
        issue.problem_statement,
        issue.evidence,
        _name(issue.root_cause_category),
        issue.root_cause,
        str(latest.layer) if latest else "N/A",
        latest.status if latest else "N/A",
        agreed.solution if agreed else "N/A",
        _effort(agreed.effort) if agreed else "0",
        format_datetime(issue.closed_at) if issue.closed_at else "",
    ]


def to_csv(issues: list[Issue], reference: ReferenceData | None = None) -> str | None:
    """Header plus one row per issue; None when there is nothing to export."""
    if not issues:
        return None
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(HEADERS)
    for issue in issues:
        writer.writerow(export_row(issue, reference))
    return buf.getvalue()


def export_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"IssueTracker_Export_{today.isoformat()}.csv"
