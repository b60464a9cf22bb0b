"""
reference.py - Enumerations and reference (master) data
Single responsibility: define selectable option sets and risk weights.
"""
from dataclasses import dataclass, field
from typing import Optional

from issuedesk.config import DEFAULT_RISK_WEIGHT
from issuedesk.domain.models import Ref

STATUS_OPEN = "Open"
STATUS_IN_PROCESS = "In Process"
STATUS_RESOLVED = "Resolved"
STATUS_FLOW: list[str] = [STATUS_OPEN, STATUS_IN_PROCESS, STATUS_RESOLVED]

ISSUE_STAGES: list[str] = [
    "Triage",
    "Investigation",
    "Implementation",
    "Verification",
    "Deployment",
    "Monitoring",
]

ENVIRONMENTS: list[str] = [
    "Development",
    "Staging",
    "Production",
    "Disaster Recovery",
    "N/A",
]

LAYER_PENDING = "Pending"
LAYER_DONE = "Done"
LAYER_STATUSES: list[str] = [LAYER_PENDING, LAYER_DONE]

DEFAULT_ENVIRONMENT = "Development"
DEFAULT_STAGE = "Triage"
DEFAULT_ISSUE_TYPE = "Bug"


@dataclass
class ReferenceItem:
    id: str
    name: str
    score: Optional[int] = None

    def __getitem__(self, key):
        return getattr(self, key)

    @classmethod
    def from_dict(cls, data: dict) -> "ReferenceItem":
        score = data.get("score")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            score=int(score) if score is not None else None,
        )


@dataclass
class ReferenceData:
    users: list[ReferenceItem] = field(default_factory=list)
    risks: list[ReferenceItem] = field(default_factory=list)
    projects: list[ReferenceItem] = field(default_factory=list)
    issue_types: list[ReferenceItem] = field(default_factory=list)
    stages: list[ReferenceItem] = field(default_factory=list)
    root_causes: list[ReferenceItem] = field(default_factory=list)

    def risk_weight(self, risk_id: str) -> int:
        for item in self.risks:
            if item.id == risk_id:
                return item.score if item.score is not None else DEFAULT_RISK_WEIGHT
        return DEFAULT_RISK_WEIGHT

    def find(self, kind: str, item_id: str | None) -> ReferenceItem | None:
        if not item_id:
            return None
        return next((i for i in getattr(self, kind) if i.id == item_id), None)

    def name_of(self, kind: str, item_id: str | None) -> str:
        item = self.find(kind, item_id)
        return item.name if item else (item_id or "")

    def find_by_name(self, kind: str, name: str | None) -> ReferenceItem | None:
        if not name:
            return None
        key = name.strip().lower()
        return next((i for i in getattr(self, kind) if i.name.lower() == key), None)

    def resolve(self, kind: str, ref: Ref | None) -> Ref | None:
        """Map a name-keyed reference (older snapshots) onto the master-data id."""
        if ref is None or self.find(kind, ref.id):
            return ref
        item = self.find_by_name(kind, ref.name or ref.id)
        return Ref(id=item.id, name=item.name) if item else ref

    def resolve_risk(self, risk: str) -> str:
        if self.find("risks", risk):
            return risk
        item = self.find_by_name("risks", risk)
        return item.id if item else risk


def _slug(name: str) -> str:
    return name.lower().replace(" ", "-")


def _items(names: list[str], scores: dict[str, int] | None = None) -> list[ReferenceItem]:
    scores = scores or {}
    return [ReferenceItem(id=_slug(n), name=n, score=scores.get(n)) for n in names]


RISK_WEIGHTS: dict[str, int] = {
    "Data Loss": 20,
    "Security Breach": 25,
    "Compliance Violation": 20,
    "Financial Impact": 15,
    "Reputation Damage": 10,
    "SLA Breach": 5,
}


def default_reference_data() -> ReferenceData:
    """Reference data used by the local backend (no master-data service)."""
    return ReferenceData(
        users=_items([
            "Alice Engineer",
            "Bob Manager",
            "Charlie Director",
            "Diana VP",
            "Evan CTO",
            "Frank External",
            "Grace Support",
            "Heidi Ops",
            "Ivan Security",
            "Judy QA",
        ]),
        risks=_items(list(RISK_WEIGHTS), RISK_WEIGHTS),
        projects=_items([
            "Alpha API",
            "Beta Frontend",
            "Gamma DB",
            "Delta Auth",
            "Epsilon Mobile",
            "Zeta Analytics",
            "Omega Core",
        ]),
        issue_types=_items([
            "Bug",
            "Incident",
            "Change Request",
            "Vulnerability",
            "Feature Request",
            "Tech Debt",
        ]),
        stages=_items(ISSUE_STAGES),
        root_causes=_items([
            "Code Error",
            "Configuration",
            "Infrastructure",
            "Third Party",
            "Human Error",
            "Capacity",
            "Design Flaw",
            "Data Quality",
        ]),
    )
