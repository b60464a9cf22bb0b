"""
seed.py - Sample data
Single responsibility: the record set used when no usable snapshot exists.
"""
from datetime import datetime, timedelta

from issuedesk.domain.models import (
    AuditEntry,
    Comment,
    EscalationLayer,
    Issue,
    Ref,
    Resolution,
    Stakeholder,
)
from issuedesk.domain.reference import default_reference_data


def seed_issues() -> list[Issue]:
    now = datetime.now()
    two_days_ago = now - timedelta(days=2)
    ref = default_reference_data()

    def pick(kind: str, name: str) -> Ref:
        item = next(i for i in getattr(ref, kind) if i.name == name)
        return Ref(id=item.id, name=item.name)

    risks = [pick("risks", "SLA Breach").id, pick("risks", "Reputation Damage").id]
    return [
        Issue(
            id="1",
            title="Production Latency Spike in API Gateway",
            status="In Process",
            stage=pick("stages", "Investigation"),
            created_at=two_days_ago.isoformat(timespec="seconds"),
            reported_by=pick("users", "Alice Engineer"),
            reported_at=two_days_ago.isoformat(timespec="minutes"),
            environment="Production",
            project=pick("projects", "Alpha API"),
            issue_type=pick("issue_types", "Incident"),
            assignee=pick("users", "Bob Manager"),
            context="Observed during peak load on Monday.",
            problem_statement="API response times increased by 400% causing timeouts.",
            evidence="Grafana dashboards screenshot attached.",
            risks=risks,
            risk_score=sum(ref.risk_weight(r) for r in risks),
            root_cause_category=pick("root_causes", "Capacity"),
            root_cause="Insufficient connection pool settings for peak traffic.",
            escalations=[
                EscalationLayer(
                    id="101",
                    layer=1,
                    status="Done",
                    stakeholders=[
                        Stakeholder(person=pick("users", "Bob Manager"), is_decision_maker=True),
                        Stakeholder(person=pick("users", "Alice Engineer")),
                    ],
                )
            ],
            resolutions=[
                Resolution(
                    id="201",
                    solution="Scale up AWS instances vertically",
                    pros="Quick to implement",
                    cons="High cost increase",
                    concerns="Might hit quotas",
                    effort=4,
                )
            ],
            comments=[
                Comment(
                    id="301",
                    user="Alice Engineer",
                    text="I checked the logs, looks like database locking.",
                    timestamp=now.isoformat(timespec="seconds"),
                )
            ],
            audit_log=[
                AuditEntry(
                    id="401",
                    action="Issue Created",
                    timestamp=two_days_ago.isoformat(timespec="seconds"),
                ),
                AuditEntry(
                    id="402",
                    action="Status changed to In Process",
                    timestamp=(now - timedelta(hours=11)).isoformat(timespec="seconds"),
                ),
            ],
        )
    ]
