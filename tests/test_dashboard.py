import asyncio

import pytest

from issuedesk.dashboard import LocalDashboard
from issuedesk.database.repositories import issues as issue_repo
from issuedesk.database.schema import initialize_schema
from issuedesk.domain.errors import EditorStateError, ValidationError
from issuedesk.domain.models import Ref
from issuedesk.services import draft_service


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "dashboard.db")


@pytest.fixture
def dashboard(db_path):
    board = LocalDashboard("tester", db_path=db_path)
    asyncio.run(board.load())
    return board


def _seed_store(db_path, issues):
    initialize_schema(db_path)
    issue_repo.save_issues(issues, db_path)


def _fill_required(board, title="DB timeout"):
    board.edit(draft_service.set_field, "title", title)
    board.edit(draft_service.set_field, "project", Ref("alpha-api", "Alpha API"))
    board.edit(draft_service.set_field, "reported_by", Ref("alice-engineer", "Alice Engineer"))
    board.edit(draft_service.set_field, "context", "Nightly batch")
    board.edit(draft_service.set_field, "problem_statement", "Queries exceed 30s")


def test_first_load_shows_seed(dashboard):
    rows = dashboard.visible_rows()
    assert [i.id for i in rows] == ["1"]
    assert dashboard.status_counts() == {"Open": 0, "In Process": 1, "Resolved": 0}
    assert dashboard.total_pages() == 1


def test_create_issue_lands_at_head_and_persists(dashboard, db_path):
    dashboard.open_create()
    _fill_required(dashboard)
    saved = asyncio.run(dashboard.save())

    assert saved.title == "DB timeout"
    assert saved.status == "Open"
    assert dashboard.state.issues[0].id == saved.id
    assert not dashboard.state.editor.is_open
    assert [i.id for i in issue_repo.load_issues(db_path)] == [saved.id, "1"]


def test_failed_validation_keeps_draft_open(dashboard):
    dashboard.open_create()
    dashboard.edit(draft_service.set_field, "title", "Only a title")
    with pytest.raises(ValidationError) as info:
        asyncio.run(dashboard.save())
    assert "context" in info.value.missing
    assert dashboard.state.editor.is_open
    assert dashboard.draft.title == "Only a title"
    assert [i.id for i in dashboard.state.issues] == ["1"]


def test_discard_leaves_record_untouched(dashboard):
    dashboard.open_view("1")
    dashboard.edit(draft_service.set_field, "title", "Scratch")
    dashboard.update_risks(["data-loss"])
    dashboard.discard()

    issue = dashboard.state.issues[0]
    assert issue.title == "Production Latency Spike in API Gateway"
    assert issue.risk_score == 15
    assert not dashboard.state.editor.is_open


def test_update_replaces_record(dashboard, db_path):
    dashboard.open_view("1")
    dashboard.set_status("Resolved")
    asyncio.run(dashboard.save())

    issue = dashboard.state.issues[0]
    assert issue.status == "Resolved"
    assert issue.closed_at
    assert issue.audit_log[-1].action == "Status changed to Resolved"
    assert issue_repo.load_issues(db_path)[0].status == "Resolved"


def test_delete_removes_record(dashboard, db_path):
    dashboard.open_view("1")
    assert asyncio.run(dashboard.delete()) is True
    assert dashboard.state.issues == []
    assert issue_repo.load_issues(db_path) == []


def test_delete_requires_stored_issue(dashboard):
    dashboard.open_create()
    with pytest.raises(EditorStateError):
        asyncio.run(dashboard.delete())


def test_second_session_is_refused(dashboard):
    dashboard.open_view("1")
    with pytest.raises(EditorStateError):
        dashboard.open_create()


def test_pending_filters_apply_only_on_request(dashboard):
    dashboard.update_filter("status", ["Open"])
    assert [i.id for i in dashboard.visible_rows()] == ["1"]

    asyncio.run(dashboard.apply_filters())
    assert dashboard.visible_rows() == []
    assert dashboard.status_counts() == {"Open": 0, "In Process": 0, "Resolved": 0}

    asyncio.run(dashboard.reset_filters())
    assert [i.id for i in dashboard.visible_rows()] == ["1"]


def test_status_shortcut(dashboard):
    asyncio.run(dashboard.apply_status_shortcut("In Process"))
    assert [i.id for i in dashboard.visible_rows()] == ["1"]
    assert dashboard.state.filters.applied.status == ("In Process",)


def test_paging_over_large_result(db_path, make_issue):
    _seed_store(db_path, [make_issue(id=f"i-{n:03d}") for n in range(250)])
    board = LocalDashboard("tester", db_path=db_path)
    asyncio.run(board.load())

    assert board.total_pages() == 3
    assert asyncio.run(board.go_to_page(5)) is False
    assert board.state.pagination.page == 1

    assert asyncio.run(board.go_to_page(3)) is True
    assert len(board.visible_rows()) == 50

    asyncio.run(board.change_limit(300))
    assert board.state.pagination.page == 1
    assert board.total_pages() == 1


def test_live_search_narrows_and_resets_page(db_path, make_issue):
    issues = [make_issue(id=f"i-{n:03d}") for n in range(150)]
    issues.append(make_issue(id="special", title="DB timeout in billing"))
    _seed_store(db_path, issues)
    board = LocalDashboard("tester", db_path=db_path)
    asyncio.run(board.load())
    asyncio.run(board.go_to_page(2))

    board.set_search("timeout")
    assert board.state.pagination.page == 1
    assert [i.id for i in board.visible_rows()] == ["special"]


def test_load_recomputes_stored_scores(db_path, make_issue):
    _seed_store(db_path, [make_issue(risks=["security-breach"], risk_score=1)])
    board = LocalDashboard("tester", db_path=db_path)
    asyncio.run(board.load())
    assert board.state.issues[0].risk_score == 25


def test_export_covers_filtered_set(dashboard):
    text = dashboard.export_csv()
    assert text.splitlines()[1].startswith("1,")

    asyncio.run(dashboard.apply_status_shortcut("Resolved"))
    assert dashboard.export_csv() is None


def test_comment_is_attributed_to_current_user(dashboard):
    dashboard.open_view("1")
    dashboard.add_comment("rolled back")
    assert dashboard.draft.comments[-1].user == "tester"


def test_name_keyed_snapshot_is_filterable_after_load(db_path, make_issue):
    legacy = make_issue(
        project=Ref("Alpha API", "Alpha API"),
        risks=["SLA Breach", "Reputation Damage"],
        risk_score=15,
    )
    _seed_store(db_path, [legacy])
    board = LocalDashboard("tester", db_path=db_path)
    asyncio.run(board.load())

    assert board.state.issues[0].risk_score == 15
    board.update_filter("project", ["alpha-api"])
    board.update_filter("risks", ["sla-breach"])
    asyncio.run(board.apply_filters())
    assert [i.id for i in board.visible_rows()] == ["i-1"]
