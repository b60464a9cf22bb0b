import json

import pytest

from issuedesk.database import connection
from issuedesk.database.repositories import issues as issue_repo
from issuedesk.database.schema import initialize_schema
from issuedesk.domain.models import Comment, Ref
from issuedesk.services import issue_service


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "issues.db")
    initialize_schema(path)
    return path


def _write_raw(db_path, payload: str, key: str = "issueTrackerData"):
    with connection.get_connection(db_path) as conn:
        conn.execute(
            "INSERT INTO snapshots (key, payload, updated_at) VALUES (?, ?, ?)",
            (key, payload, "2024-01-01T00:00:00"),
        )


def test_missing_snapshot_loads_seed(db_path):
    issues = issue_repo.load_issues(db_path)
    assert [i.id for i in issues] == ["1"]
    assert issues[0].title == "Production Latency Spike in API Gateway"
    assert issues[0].risk_score == 15


def test_save_then_load_restores_everything(db_path, make_issue):
    issue = make_issue(
        risks=["data-loss"],
        comments=[Comment(id="c1", user="alice", text="on it", timestamp="2024-03-10T10:00:00")],
    )
    issue_repo.save_issues([issue, make_issue(id="i-2")], db_path)

    loaded = issue_repo.load_issues(db_path)
    assert [i.id for i in loaded] == ["i-1", "i-2"]
    assert loaded[0] == issue


def test_save_overwrites_whole_snapshot(db_path, make_issue):
    issue_repo.save_issues([make_issue(id="a"), make_issue(id="b")], db_path)
    issue_repo.save_issues([make_issue(id="c")], db_path)
    assert [i.id for i in issue_repo.load_issues(db_path)] == ["c"]


def test_empty_snapshot_stays_empty(db_path):
    issue_repo.save_issues([], db_path)
    assert issue_repo.load_issues(db_path) == []


@pytest.mark.parametrize("payload", ["{not json", '{"id": 1}', '[{"title": "no id", "escalations": [{}]}]'])
def test_malformed_snapshot_falls_back_to_seed(db_path, payload):
    _write_raw(db_path, payload)
    assert [i.id for i in issue_repo.load_issues(db_path)] == ["1"]


def test_legacy_string_references_are_accepted(db_path):
    legacy = [
        {
            "id": "7",
            "title": "Old record",
            "project": "Alpha API",
            "reportedBy": "Alice Engineer",
            "issueType": {"id": "bug", "name": "Bug"},
            "risks": [{"id": "sla-breach"}, "sla-breach"],
            "resolutions": [{"id": "r1", "solution": "x", "effort": "High"}],
        }
    ]
    _write_raw(db_path, json.dumps(legacy))

    issue = issue_repo.load_issues(db_path)[0]
    assert issue.project.display_name == "Alpha API"
    assert issue.issue_type.id == "bug"
    assert issue.risks == ["sla-breach"]
    assert issue.resolutions[0].effort == 0


def test_name_keyed_records_resolve_to_reference_ids(db_path, reference):
    legacy = [
        {
            "id": "1",
            "title": "Production Latency Spike in API Gateway",
            "status": "In Process",
            "stage": "Investigation",
            "project": "Alpha API",
            "reportedBy": "Alice Engineer",
            "issueType": "Incident",
            "risks": ["SLA Breach", "Reputation Damage"],
            "riskScore": 15,
            "escalations": [
                {
                    "id": "e1",
                    "layer": 1,
                    "stakeholders": [{"name": "Bob Manager", "isDecisionMaker": True}],
                }
            ],
        }
    ]
    _write_raw(db_path, json.dumps(legacy))

    issue = issue_service.resolve_references(issue_repo.load_issues(db_path)[0], reference)
    assert issue.project == Ref("alpha-api", "Alpha API")
    assert issue.stage.id == "investigation"
    assert issue.issue_type.id == "incident"
    assert issue.reported_by.id == "alice-engineer"
    assert issue.risks == ["sla-breach", "reputation-damage"]
    assert issue.risk_score == 15
    assert issue.escalations[0].stakeholders[0].person.id == "bob-manager"


def test_unknown_names_are_kept_as_is(reference, make_issue):
    issue = issue_service.resolve_references(
        make_issue(project=Ref("Retired Project", "Retired Project"), risks=["Solar Flare"]), reference
    )
    assert issue.project.id == "Retired Project"
    assert issue.risks == ["Solar Flare"]
    assert issue.risk_score == 10


def test_snapshots_are_keyed(db_path, make_issue):
    issue_repo.save_issues([make_issue(id="x")], db_path, key="other")
    assert [i.id for i in issue_repo.load_issues(db_path, key="other")] == ["x"]
    assert [i.id for i in issue_repo.load_issues(db_path)] == ["1"]
