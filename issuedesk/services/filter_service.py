"""
filter_service.py - Filter engine
Single responsibility: evaluate the applied filter set against issues locally,
or translate it into query parameters for server-side filtering.
"""
from dataclasses import replace

from issuedesk.domain.filters import IssueFilter
from issuedesk.domain.models import Issue, ref_id
from issuedesk.services import pagination_service
from issuedesk.state import AppState
from issuedesk.utils.time import parse_bound, parse_iso, to_epoch_seconds


def _member(value, selected) -> bool:
    return not selected or value in selected


def _in_range(value, start, end) -> bool:
    lo = parse_bound(start)
    hi = parse_bound(end, end=True)
    if lo is None and hi is None:
        return True
    ts = parse_iso(value)
    if ts is None:
        # an unset timestamp never satisfies a bounded range
        return False
    if lo is not None and ts < lo:
        return False
    if hi is not None and ts > hi:
        return False
    return True


def matches_search(issue: Issue, search: str) -> bool:
    term = (search or "").strip().lower()
    if not term:
        return True
    project_name = issue.project.display_name.lower() if issue.project else ""
    return term in issue.title.lower() or term in issue.id.lower() or term in project_name


def matches(issue: Issue, flt: IssueFilter, search: str = "") -> bool:
    """True iff the issue satisfies every active dimension (conjunction)."""
    if not matches_search(issue, search):
        return False
    if not _member(ref_id(issue.project), flt.project):
        return False
    if not _member(issue.environment, flt.environment):
        return False
    if not _member(ref_id(issue.issue_type), flt.issue_type):
        return False
    if not _member(issue.status, flt.status):
        return False
    if not _member(ref_id(issue.stage), flt.stage):
        return False
    if not _member(ref_id(issue.root_cause_category), flt.root_cause):
        return False
    if flt.risks and not set(issue.risks) & set(flt.risks):
        return False
    if not _member(ref_id(issue.assignee), flt.assignees):
        return False
    if not _in_range(issue.reported_at, flt.reported_start, flt.reported_end):
        return False
    if not _in_range(issue.closed_at, flt.resolved_start, flt.resolved_end):
        return False
    return True


def filter_issues(issues: list[Issue], flt: IssueFilter, search: str = "") -> list[Issue]:
    return [i for i in issues if matches(i, flt, search)]


def to_query_params(flt: IssueFilter, search: str, page: int, limit: int) -> dict[str, str | int]:
    """Serialize the applied filter set plus pagination for the list endpoint."""
    params: dict[str, str | int] = {"page": page, "limit": limit}
    if search and search.strip():
        params["search"] = search.strip()
    multi = {
        "project": flt.project,
        "environment": flt.environment,
        "issueType": flt.issue_type,
        "stage": flt.stage,
        "rootCause": flt.root_cause,
        "risk": flt.risks,
        "status": flt.status,
        "assignee": flt.assignees,
    }
    for name, values in multi.items():
        if values:
            params[name] = ",".join(values)
    bounds = {
        "reportedStart": to_epoch_seconds(flt.reported_start),
        "reportedEnd": to_epoch_seconds(flt.reported_end, end=True),
        "resolvedStart": to_epoch_seconds(flt.resolved_start),
        "resolvedEnd": to_epoch_seconds(flt.resolved_end, end=True),
    }
    for name, value in bounds.items():
        if value is not None:
            params[name] = value
    return params


# ---------------------------------------------------------------------------
# Two-phase transitions (state -> state)
# ---------------------------------------------------------------------------


def update_pending(state: AppState, key: str, value) -> AppState:
    pending = state.filters.pending.with_value(key, value)
    return replace(state, filters=replace(state.filters, pending=pending))


def apply(state: AppState) -> AppState:
    return replace(
        state,
        filters=replace(state.filters, applied=state.filters.pending),
        applied_search=state.search,
        pagination=pagination_service.reset_page(state.pagination),
    )


def reset(state: AppState) -> AppState:
    empty = IssueFilter()
    return replace(
        state,
        filters=replace(state.filters, pending=empty, applied=empty),
        pagination=pagination_service.reset_page(state.pagination),
    )


def status_shortcut(state: AppState, status: str) -> AppState:
    """Dashboard tile click: filter by one status immediately."""
    pending = state.filters.pending.with_value("status", [status])
    applied = state.filters.applied.with_value("status", [status])
    return replace(
        state,
        filters=replace(state.filters, pending=pending, applied=applied),
        pagination=pagination_service.reset_page(state.pagination),
    )
