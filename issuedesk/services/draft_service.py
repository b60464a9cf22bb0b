"""
draft_service.py - Draft editor
Single responsibility: pure mutations of an in-memory draft issue.

Every function returns a new Issue and leaves its argument untouched, so a
draft never shares nested lists with the record it was cloned from.
"""
import copy
import uuid
from dataclasses import fields, replace

from issuedesk.domain.errors import EscalationPendingError, NotFoundError
from issuedesk.domain.models import (
    AuditEntry,
    Comment,
    EscalationLayer,
    Issue,
    Ref,
    Resolution,
    Stakeholder,
)
from issuedesk.domain.reference import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_ISSUE_TYPE,
    DEFAULT_STAGE,
    LAYER_DONE,
    LAYER_PENDING,
    STATUS_OPEN,
    STATUS_RESOLVED,
    ReferenceData,
)
from issuedesk.utils.time import now_iso, now_minutes

# Fields owned by dedicated mutators; set_field refuses them
_MANAGED_FIELDS = {"id", "risks", "risk_score", "escalations", "resolutions", "comments", "audit_log"}
_RESOLUTION_FIELDS = {"solution", "pros", "cons", "concerns", "effort"}


def new_id() -> str:
    return uuid.uuid4().hex


def clone(issue: Issue) -> Issue:
    return copy.deepcopy(issue)


def new_draft(reference: ReferenceData | None = None, now: str | None = None, record_audit: bool = True) -> Issue:
    """Blank issue with defaulted enum values."""
    reference = reference or ReferenceData()
    now = now or now_iso()

    def default_ref(kind: str, name: str) -> Ref | None:
        item = next((i for i in getattr(reference, kind) if i.name == name), None)
        return Ref(id=item.id, name=item.name) if item else None

    draft = Issue(
        status=STATUS_OPEN,
        stage=default_ref("stages", DEFAULT_STAGE),
        environment=DEFAULT_ENVIRONMENT,
        issue_type=default_ref("issue_types", DEFAULT_ISSUE_TYPE),
        reported_at=now_minutes(),
        created_at=now,
    )
    if record_audit:
        draft.audit_log.append(AuditEntry(id=new_id(), action="Draft Started", timestamp=now))
    return draft


def set_field(draft: Issue, name: str, value) -> Issue:
    """Replace exactly one plain field."""
    if name in _MANAGED_FIELDS or name not in {f.name for f in fields(Issue)}:
        raise KeyError(f"Field cannot be set directly: {name}")
    return replace(clone(draft), **{name: value})


def _audit(draft: Issue, action: str) -> None:
    draft.audit_log.append(AuditEntry(id=new_id(), action=action, timestamp=now_iso()))


# ---------------------------------------------------------------------------
# Risks
# ---------------------------------------------------------------------------


def compute_risk_score(risks, reference: ReferenceData) -> int:
    return sum(reference.risk_weight(r) for r in dict.fromkeys(risks))


def update_risks(draft: Issue, risks, reference: ReferenceData) -> Issue:
    """Replace the risk set and recompute the derived score."""
    out = clone(draft)
    out.risks = list(dict.fromkeys(risks))
    out.risk_score = compute_risk_score(out.risks, reference)
    return out


# ---------------------------------------------------------------------------
# Status / stage
# ---------------------------------------------------------------------------


def set_status(draft: Issue, status: str, record_audit: bool = True) -> Issue:
    out = clone(draft)
    out.status = status
    if status == STATUS_RESOLVED:
        out.closed_at = out.closed_at or now_minutes()
    else:
        out.closed_at = None
    if record_audit:
        _audit(out, f"Status changed to {status}")
    return out


def set_stage(draft: Issue, stage: Ref, record_audit: bool = True) -> Issue:
    out = clone(draft)
    out.stage = stage
    if record_audit:
        _audit(out, f"Stage changed to {stage.display_name}")
    return out


# ---------------------------------------------------------------------------
# Escalation layers
# ---------------------------------------------------------------------------


def _layer(draft: Issue, layer_id: str) -> EscalationLayer:
    for layer in draft.escalations:
        if layer.id == layer_id:
            return layer
    raise NotFoundError(f"Escalation layer {layer_id} not found")


def can_add_layer(draft: Issue) -> bool:
    return not draft.escalations or draft.escalations[-1].status == LAYER_DONE


def add_layer(draft: Issue) -> Issue:
    if not can_add_layer(draft):
        raise EscalationPendingError(
            f"Layer {draft.escalations[-1].layer} must be Done before escalating further"
        )
    out = clone(draft)
    out.escalations.append(
        EscalationLayer(id=new_id(), layer=len(out.escalations) + 1, status=LAYER_PENDING)
    )
    return out


def set_layer_status(draft: Issue, layer_id: str, status: str) -> Issue:
    out = clone(draft)
    _layer(out, layer_id).status = status
    return out


def add_stakeholder(draft: Issue, layer_id: str, person: Ref) -> Issue:
    """First stakeholder of an empty layer becomes decision maker."""
    out = clone(draft)
    layer = _layer(out, layer_id)
    if any(s.person.id == person.id for s in layer.stakeholders):
        return draft
    layer.stakeholders.append(
        Stakeholder(person=person, is_decision_maker=not layer.stakeholders)
    )
    return out


def remove_stakeholder(draft: Issue, layer_id: str, person: Ref) -> Issue:
    out = clone(draft)
    layer = _layer(out, layer_id)
    layer.stakeholders = [s for s in layer.stakeholders if s.person.id != person.id]
    return out


def set_decision_maker(draft: Issue, layer_id: str, person: Ref) -> Issue:
    out = clone(draft)
    layer = _layer(out, layer_id)
    if not any(s.person.id == person.id for s in layer.stakeholders):
        raise NotFoundError(f"{person.display_name} is not a stakeholder of layer {layer.layer}")
    for s in layer.stakeholders:
        s.is_decision_maker = s.person.id == person.id
    return out


def delete_layer(draft: Issue, layer_id: str) -> Issue:
    """Unconditional; confirming the deletion is the caller's job."""
    out = clone(draft)
    _layer(out, layer_id)
    out.escalations = [e for e in out.escalations if e.id != layer_id]
    for position, layer in enumerate(out.escalations, start=1):
        layer.layer = position
    return out


# ---------------------------------------------------------------------------
# Resolutions
# ---------------------------------------------------------------------------


def _resolution(draft: Issue, res_id: str) -> Resolution:
    for res in draft.resolutions:
        if res.id == res_id:
            return res
    raise NotFoundError(f"Resolution {res_id} not found")


def add_resolution(
    draft: Issue,
    solution: str,
    pros: str = "",
    cons: str = "",
    concerns: str = "",
    effort: float = 0,
) -> Issue:
    out = clone(draft)
    out.resolutions.append(
        Resolution(
            id=new_id(),
            solution=solution,
            pros=pros,
            cons=cons,
            concerns=concerns,
            effort=effort or 0,
            is_agreed=False,
        )
    )
    return out


def update_resolution_field(draft: Issue, res_id: str, field: str, value) -> Issue:
    if field not in _RESOLUTION_FIELDS:
        raise KeyError(f"Unknown resolution field: {field}")
    out = clone(draft)
    setattr(_resolution(out, res_id), field, value)
    return out


def toggle_agreement(draft: Issue, res_id: str) -> Issue:
    """Agreeing one proposal withdraws agreement from all others."""
    out = clone(draft)
    target = _resolution(out, res_id)
    agreed = not target.is_agreed
    for res in out.resolutions:
        res.is_agreed = False
    target.is_agreed = agreed
    return out


def delete_resolution(draft: Issue, res_id: str) -> Issue:
    out = clone(draft)
    _resolution(out, res_id)
    out.resolutions = [r for r in out.resolutions if r.id != res_id]
    return out


def agreed_resolution(issue: Issue) -> Resolution | None:
    return next((r for r in issue.resolutions if r.is_agreed), None)


# ---------------------------------------------------------------------------
# Comments / history
# ---------------------------------------------------------------------------


def add_comment(draft: Issue, text: str, user: str) -> Issue:
    if not text or not text.strip():
        return draft
    out = clone(draft)
    out.comments.append(Comment(id=new_id(), user=user, text=text.strip(), timestamp=now_iso()))
    return out


def audit_history(issue: Issue) -> list[AuditEntry]:
    """Audit entries newest first."""
    return list(reversed(issue.audit_log))
