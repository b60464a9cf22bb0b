import pytest

from issuedesk.domain.errors import EditorStateError, NotFoundError, ValidationError
from issuedesk.domain.models import Ref
from issuedesk.services import draft_service, issue_service
from issuedesk.state import EditorMode, EditorSession


def _ref(item) -> Ref:
    return Ref(item.id, item.name)


def _valid_draft(reference, **fields):
    draft = draft_service.new_draft(reference)
    values = dict(
        title="DB timeout",
        project=_ref(reference.projects[0]),
        reported_by=_ref(reference.users[0]),
        context="Nightly batch",
        problem_statement="Queries exceed 30s",
    )
    values.update(fields)
    for name, value in values.items():
        draft = draft_service.set_field(draft, name, value)
    return draft


def test_validate_lists_missing_required_fields(reference):
    draft = draft_service.new_draft(reference)
    draft = draft_service.set_field(draft, "title", "   ")
    assert issue_service.validate(draft) == [
        "title",
        "project",
        "reported_by",
        "context",
        "problem_statement",
    ]


def test_commit_rejects_incomplete_draft(reference, make_issue):
    existing = [make_issue()]
    draft = _valid_draft(reference, context="")
    with pytest.raises(ValidationError) as info:
        issue_service.commit(existing, draft, is_creating=True, reference=reference)
    assert info.value.missing == ["context"]
    assert existing == [make_issue()]


def test_create_inserts_at_head_with_fresh_id(reference, make_issue):
    existing = [make_issue(id="old")]
    draft = _valid_draft(reference)

    issues, final = issue_service.commit(
        existing, draft, is_creating=True, reference=reference, now="2024-06-01T12:00:00"
    )
    assert issues[0] is final
    assert issues[1:] == existing
    assert final.id not in ("new", "old")
    assert final.status == "Open"
    assert final.title == "DB timeout"
    assert final.created_at == "2024-06-01T12:00:00"
    assert all(a.timestamp == "2024-06-01T12:00:00" for a in final.audit_log)


def test_create_trims_text_and_recomputes_score(reference, make_issue):
    draft = _valid_draft(reference, title="  DB timeout  ")
    draft.risks = ["sla-breach", "reputation-damage"]
    draft.risk_score = 999
    _, final = issue_service.commit([], draft, is_creating=True, reference=reference)
    assert final.title == "DB timeout"
    assert final.risk_score == 15


def test_update_replaces_in_place(reference, make_issue):
    existing = [make_issue(id="a"), make_issue(id="b"), make_issue(id="c")]
    draft = draft_service.set_field(draft_service.clone(existing[1]), "title", "Renamed")

    issues, final = issue_service.commit(existing, draft, is_creating=False, reference=reference)
    assert [i.id for i in issues] == ["a", "b", "c"]
    assert issues[1].title == "Renamed"
    assert existing[1].title == "Checkout errors"


def test_update_of_missing_record(reference, make_issue):
    draft = make_issue(id="gone")
    with pytest.raises(NotFoundError):
        issue_service.commit([make_issue(id="a")], draft, is_creating=False, reference=reference)

    issues, _ = issue_service.commit(
        [make_issue(id="a")], draft, is_creating=False, reference=reference, require_existing=False
    )
    assert [i.id for i in issues] == ["a"]


def test_remove_issue(make_issue):
    issues = [make_issue(id="a"), make_issue(id="b")]
    assert [i.id for i in issue_service.remove_issue(issues, "a")] == ["b"]
    with pytest.raises(NotFoundError):
        issue_service.remove_issue(issues, "zzz")


def test_only_one_session_at_a_time(reference, make_issue):
    session = issue_service.open_create(EditorSession(), reference)
    assert session.mode == EditorMode.CREATING
    with pytest.raises(EditorStateError):
        issue_service.open_create(session, reference)
    with pytest.raises(EditorStateError):
        issue_service.open_view(session, [make_issue()], "i-1")


def test_open_view_edits_a_copy(make_issue):
    issues = [make_issue()]
    session = issue_service.open_view(EditorSession(), issues, "i-1")
    session = issue_service.edit(session, draft_service.set_field, "title", "Draft title")
    assert session.draft.title == "Draft title"
    assert issues[0].title == "Checkout errors"
    assert session.issue_id == "i-1"


def test_open_view_unknown_id(make_issue):
    with pytest.raises(NotFoundError):
        issue_service.open_view(EditorSession(), [make_issue()], "nope")


def test_edit_requires_open_session():
    with pytest.raises(EditorStateError):
        issue_service.edit(EditorSession(), draft_service.set_field, "title", "x")


def test_tokens_distinguish_sessions(reference):
    first = issue_service.open_create(EditorSession(), reference)
    closed = issue_service.close_session(first)
    second = issue_service.open_create(closed, reference)
    assert not closed.is_open
    assert closed.draft is None
    assert second.token != first.token
