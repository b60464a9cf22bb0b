"""
models.py - Domain models
Single responsibility: typed containers for core entities and their JSON shape.
"""
from dataclasses import dataclass, field
from typing import Optional

NEW_ISSUE_ID = "new"


@dataclass(frozen=True)
class Ref:
    """Reference to master data: business logic keys off ``id`` only."""

    id: str
    name: str = ""

    def __getitem__(self, key):
        return getattr(self, key)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def parse(cls, value) -> Optional["Ref"]:
        """Accept a ``{id, name}`` mapping or a bare string (older snapshots)."""
        if value is None or value == "":
            return None
        if isinstance(value, Ref):
            return value
        if isinstance(value, dict):
            if value.get("id") in (None, ""):
                return None
            return cls(id=str(value["id"]), name=str(value.get("name") or ""))
        text = str(value)
        return cls(id=text, name=text)


def _ref_dict(ref: Ref | None) -> dict | None:
    return ref.to_dict() if ref else None


def ref_id(ref: Ref | None) -> str | None:
    return ref.id if ref else None


@dataclass
class Stakeholder:
    person: Ref
    is_decision_maker: bool = False

    def __getitem__(self, key):
        return getattr(self, key)

    def to_dict(self) -> dict:
        return {
            "id": self.person.id,
            "name": self.person.display_name,
            "isDecisionMaker": self.is_decision_maker,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Stakeholder":
        person = Ref(id=str(data.get("id") or data["name"]), name=str(data.get("name") or ""))
        return cls(person=person, is_decision_maker=bool(data.get("isDecisionMaker")))


@dataclass
class EscalationLayer:
    id: str
    layer: int
    status: str = "Pending"
    stakeholders: list[Stakeholder] = field(default_factory=list)
    remarks: str = ""

    def __getitem__(self, key):
        return getattr(self, key)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "layer": self.layer,
            "status": self.status,
            "stakeholders": [s.to_dict() for s in self.stakeholders],
            "remarks": self.remarks,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EscalationLayer":
        return cls(
            id=str(data["id"]),
            layer=int(data.get("layer") or 0),
            status=data.get("status") or "Pending",
            stakeholders=[Stakeholder.from_dict(s) for s in data.get("stakeholders") or []],
            remarks=data.get("remarks") or "",
        )


@dataclass
class Resolution:
    id: str
    solution: str = ""
    pros: str = ""
    cons: str = ""
    concerns: str = ""
    effort: float = 0  # man-hours
    is_agreed: bool = False

    def __getitem__(self, key):
        return getattr(self, key)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "solution": self.solution,
            "pros": self.pros,
            "cons": self.cons,
            "concerns": self.concerns,
            "effort": self.effort,
            "isAgreed": self.is_agreed,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Resolution":
        return cls(
            id=str(data["id"]),
            solution=data.get("solution") or "",
            pros=data.get("pros") or "",
            cons=data.get("cons") or "",
            concerns=data.get("concerns") or "",
            effort=_effort(data.get("effort")),
            is_agreed=bool(data.get("isAgreed")),
        )


def _effort(value) -> float:
    # earlier snapshots stored an effort level ("Low", "High", ...) instead of hours
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0


@dataclass
class Comment:
    id: str
    user: str
    text: str
    timestamp: str

    def __getitem__(self, key):
        return getattr(self, key)

    def to_dict(self) -> dict:
        return {"id": self.id, "user": self.user, "text": self.text, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "Comment":
        return cls(
            id=str(data["id"]),
            user=data.get("user") or "",
            text=data.get("text") or "",
            timestamp=data.get("timestamp") or "",
        )


@dataclass
class AuditEntry:
    id: str
    action: str
    timestamp: str

    def __getitem__(self, key):
        return getattr(self, key)

    def to_dict(self) -> dict:
        return {"id": self.id, "action": self.action, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        return cls(
            id=str(data["id"]),
            action=data.get("action") or "",
            timestamp=data.get("timestamp") or "",
        )


@dataclass
class Issue:
    title: str = ""
    status: str = "Open"
    stage: Ref | None = None
    project: Ref | None = None
    environment: str = ""
    issue_type: Ref | None = None
    root_cause_category: Ref | None = None
    reported_by: Ref | None = None
    reported_at: str | None = None
    assignee: Ref | None = None
    closed_at: str | None = None
    created_at: str | None = None
    context: str = ""
    problem_statement: str = ""
    evidence: str = ""
    root_cause: str = ""
    risks: list[str] = field(default_factory=list)
    risk_score: int = 0
    escalations: list[EscalationLayer] = field(default_factory=list)
    resolutions: list[Resolution] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    audit_log: list[AuditEntry] = field(default_factory=list)
    id: str = NEW_ISSUE_ID

    def __getitem__(self, key):
        return getattr(self, key)

    @property
    def is_new(self) -> bool:
        return self.id == NEW_ISSUE_ID

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "stage": _ref_dict(self.stage),
            "created": self.created_at,
            "reportedBy": _ref_dict(self.reported_by),
            "reportedAt": self.reported_at,
            "environment": self.environment,
            "project": _ref_dict(self.project),
            "issueType": _ref_dict(self.issue_type),
            "assignee": _ref_dict(self.assignee),
            "context": self.context,
            "problemStatement": self.problem_statement,
            "evidence": self.evidence,
            "risks": list(self.risks),
            "riskScore": self.risk_score,
            "rootCauseCategory": _ref_dict(self.root_cause_category),
            "rootCause": self.root_cause,
            "closedAt": self.closed_at,
            "escalations": [e.to_dict() for e in self.escalations],
            "resolutions": [r.to_dict() for r in self.resolutions],
            "comments": [c.to_dict() for c in self.comments],
            "auditLog": [a.to_dict() for a in self.audit_log],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Issue":
        risks: list[str] = []
        for r in data.get("risks") or []:
            rid = str(r["id"]) if isinstance(r, dict) else str(r)
            if rid not in risks:
                risks.append(rid)
        return cls(
            id=str(data.get("id") or NEW_ISSUE_ID),
            title=data.get("title") or "",
            status=data.get("status") or "Open",
            stage=Ref.parse(data.get("stage")),
            project=Ref.parse(data.get("project")),
            environment=data.get("environment") or "",
            issue_type=Ref.parse(data.get("issueType")),
            root_cause_category=Ref.parse(data.get("rootCauseCategory")),
            reported_by=Ref.parse(data.get("reportedBy")),
            reported_at=data.get("reportedAt") or None,
            assignee=Ref.parse(data.get("assignee")),
            closed_at=data.get("closedAt") or None,
            created_at=data.get("created") or None,
            context=data.get("context") or "",
            problem_statement=data.get("problemStatement") or "",
            evidence=data.get("evidence") or "",
            root_cause=data.get("rootCause") or "",
            risks=risks,
            risk_score=int(data.get("riskScore") or 0),
            escalations=[EscalationLayer.from_dict(e) for e in data.get("escalations") or []],
            resolutions=[Resolution.from_dict(r) for r in data.get("resolutions") or []],
            comments=[Comment.from_dict(c) for c in data.get("comments") or []],
            audit_log=[AuditEntry.from_dict(a) for a in data.get("auditLog") or []],
        )


@dataclass
class IssuePage:
    """One page of list results from the storage collaborator."""

    issues: list[Issue]
    total: int
    status_counts: dict[str, int] | None = None
