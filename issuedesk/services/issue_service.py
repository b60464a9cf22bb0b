"""
issue_service.py - Issue service layer
Single responsibility: validate and commit drafts, apply record-store changes,
and enforce the one-draft-at-a-time editing lifecycle.
"""
import logging
from dataclasses import replace

from issuedesk.domain.errors import EditorStateError, NotFoundError, ValidationError
from issuedesk.domain.models import Issue
from issuedesk.domain.reference import ReferenceData
from issuedesk.services import draft_service
from issuedesk.state import EditorMode, EditorSession
from issuedesk.utils.time import now_iso

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = (
    "title",
    "project",
    "environment",
    "issue_type",
    "reported_by",
    "reported_at",
    "context",
    "problem_statement",
)

_TEXT_FIELDS = ("title", "context", "problem_statement", "evidence", "root_cause")


def _blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def validate(draft: Issue) -> list[str]:
    """Names of required fields that are missing, in form order."""
    return [name for name in REQUIRED_FIELDS if _blank(getattr(draft, name))]


def normalize(draft: Issue, reference: ReferenceData) -> Issue:
    """Trim narrative text, dedupe risks and recompute the derived risk score."""
    out = draft_service.update_risks(draft, draft.risks, reference)
    for name in _TEXT_FIELDS:
        setattr(out, name, (getattr(out, name) or "").strip())
    for position, layer in enumerate(out.escalations, start=1):
        layer.layer = position
    return out


_REF_KINDS = (
    ("project", "projects"),
    ("stage", "stages"),
    ("issue_type", "issue_types"),
    ("root_cause_category", "root_causes"),
    ("reported_by", "users"),
    ("assignee", "users"),
)


def resolve_references(issue: Issue, reference: ReferenceData) -> Issue:
    """Rekey name-only references onto master-data ids and recompute the score.

    Older snapshots stored projects, people and risks by display name.
    """
    out = draft_service.clone(issue)
    for name, kind in _REF_KINDS:
        setattr(out, name, reference.resolve(kind, getattr(out, name)))
    for layer in out.escalations:
        for member in layer.stakeholders:
            member.person = reference.resolve("users", member.person)
    return draft_service.update_risks(out, [reference.resolve_risk(r) for r in out.risks], reference)


def commit(
    issues: list[Issue],
    draft: Issue,
    is_creating: bool,
    reference: ReferenceData | None = None,
    now: str | None = None,
    record_audit: bool = True,
    require_existing: bool = True,
) -> tuple[list[Issue], Issue]:
    """Validate and fold the draft into a new record list.

    Create inserts at the head with a fresh id; update replaces in place.
    Raises ValidationError (draft untouched) when required fields are missing.
    """
    missing = validate(draft)
    if missing:
        logger.info("Save rejected, missing fields: %s", ", ".join(missing))
        raise ValidationError(missing)
    final = normalize(draft, reference or ReferenceData())
    if is_creating:
        now = now or now_iso()
        final.id = draft_service.new_id()
        final.created_at = now
        if record_audit:
            for entry in final.audit_log:
                entry.timestamp = now
        return [final, *issues], final
    return replace_issue(issues, final, require_existing), final


def replace_issue(issues: list[Issue], issue: Issue, require_existing: bool = True) -> list[Issue]:
    if require_existing and not any(i.id == issue.id for i in issues):
        raise NotFoundError(f"Issue {issue.id} not found")
    return [issue if i.id == issue.id else i for i in issues]


def remove_issue(issues: list[Issue], issue_id: str, require_existing: bool = True) -> list[Issue]:
    if require_existing and not any(i.id == issue_id for i in issues):
        raise NotFoundError(f"Issue {issue_id} not found")
    return [i for i in issues if i.id != issue_id]


def find_issue(issues: list[Issue], issue_id: str) -> Issue:
    for issue in issues:
        if issue.id == issue_id:
            return issue
    raise NotFoundError(f"Issue {issue_id} not found")


# ---------------------------------------------------------------------------
# Editing lifecycle: Closed -> (Creating | Editing(id)) -> Closed
# ---------------------------------------------------------------------------


def _ensure_closed(session: EditorSession) -> None:
    if session.is_open:
        raise EditorStateError("Another issue is already being edited")


def open_create(session: EditorSession, reference: ReferenceData, record_audit: bool = True) -> EditorSession:
    _ensure_closed(session)
    return EditorSession(
        mode=EditorMode.CREATING,
        draft=draft_service.new_draft(reference, record_audit=record_audit),
        token=session.token + 1,
    )


def open_view(session: EditorSession, issues: list[Issue], issue_id: str) -> EditorSession:
    _ensure_closed(session)
    issue = find_issue(issues, issue_id)
    return EditorSession(
        mode=EditorMode.EDITING,
        draft=draft_service.clone(issue),
        issue_id=issue_id,
        token=session.token + 1,
    )


def edit(session: EditorSession, fn, *args, **kwargs) -> EditorSession:
    """Run a draft mutator against the live draft."""
    if not session.is_open or session.draft is None:
        raise EditorStateError("No draft is open")
    return replace(session, draft=fn(session.draft, *args, **kwargs))


def close_session(session: EditorSession) -> EditorSession:
    return EditorSession(token=session.token)
