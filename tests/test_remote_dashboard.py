import asyncio
import json

import httpx
import pytest

from issuedesk.api.client import IssueApiClient
from issuedesk.dashboard import RemoteDashboard
from issuedesk.domain.errors import StorageError
from issuedesk.domain.models import Ref
from issuedesk.services import draft_service

BASE_URL = "http://issues.test/api"

REFERENCE = {
    "/api/users": [{"id": "u1", "name": "Alice Engineer"}, {"id": "u2", "name": "Bob Manager"}],
    "/api/risks": {"data": [{"id": "r1", "name": "SLA Breach", "score": 5}, {"id": "r2", "name": "Data Loss"}]},
    "/api/projects": [{"id": "p1", "name": "Alpha API"}],
    "/api/issue-types": [{"id": "t1", "name": "Bug"}],
    "/api/issue-stages": [{"id": "s1", "name": "Triage"}],
    "/api/root-causes": [],
}


def _client(handler) -> IssueApiClient:
    return IssueApiClient(BASE_URL, token="secret", transport=httpx.MockTransport(handler))


def _page(*issues, total=None, counts=None):
    body = {"data": [i.to_dict() for i in issues], "total": total if total is not None else len(issues)}
    if counts is not None:
        body["statusCounts"] = counts
    return httpx.Response(200, json=body)


def test_reference_data_is_loaded_from_endpoints():
    seen = []

    def handler(request: httpx.Request):
        seen.append(request.url.path)
        assert request.headers["Authorization"] == "Bearer secret"
        return httpx.Response(200, json=REFERENCE[request.url.path])

    async def scenario():
        api = _client(handler)
        try:
            return await api.load_reference_data()
        finally:
            await api.close()

    ref = asyncio.run(scenario())
    assert sorted(seen) == sorted(REFERENCE)
    assert [u.name for u in ref.users] == ["Alice Engineer", "Bob Manager"]
    assert ref.risk_weight("r1") == 5
    assert ref.risk_weight("r2") == 10
    assert ref.stages[0].name == "Triage"


def test_list_sends_applied_filters_only(make_issue):
    requests = []

    def handler(request: httpx.Request):
        requests.append(request)
        return _page(make_issue(), total=1)

    async def scenario():
        board = RemoteDashboard("tester", _client(handler))
        board.update_filter("project", ["p1", "p2"])
        await board.refresh()
        board.set_search("timeout")
        await board.apply_filters()
        await board.close()

    asyncio.run(scenario())
    first, second = (dict(r.url.params) for r in requests)
    assert first == {"page": "1", "limit": "100"}
    assert second == {"page": "1", "limit": "100", "search": "timeout", "project": "p1,p2"}


def test_server_total_drives_paging(make_issue):
    def handler(request: httpx.Request):
        return _page(make_issue(), total=250, counts={"Open": 200, "Resolved": 50})

    async def scenario():
        board = RemoteDashboard("tester", _client(handler))
        await board.refresh()
        return board

    board = asyncio.run(scenario())
    assert board.total_pages() == 3
    assert board.status_counts() == {"Open": 200, "In Process": 0, "Resolved": 50}
    assert board.counts_scope == "filtered"


def test_counts_fall_back_to_current_page(make_issue):
    def handler(request: httpx.Request):
        return httpx.Response(200, json=[make_issue(id="a").to_dict(), make_issue(id="b", status="Resolved").to_dict()])

    async def scenario():
        board = RemoteDashboard("tester", _client(handler))
        await board.refresh()
        return board

    board = asyncio.run(scenario())
    assert board.state.total == 2
    assert board.status_counts() == {"Open": 1, "In Process": 0, "Resolved": 1}
    assert board.counts_scope == "page"


def test_stale_list_response_is_discarded(make_issue):
    async def scenario():
        release_old = asyncio.Event()

        async def handler(request: httpx.Request):
            if request.url.params.get("search") == "old":
                await release_old.wait()
                return _page(make_issue(id="stale"))
            return _page(make_issue(id="fresh"))

        board = RemoteDashboard("tester", _client(handler))
        board.set_search("old")
        slow = asyncio.create_task(board.submit_search())
        for _ in range(5):
            await asyncio.sleep(0)

        board.set_search("new")
        await board.submit_search()
        release_old.set()
        await slow
        await board.close()
        return board

    board = asyncio.run(scenario())
    assert [i.id for i in board.state.issues] == ["fresh"]
    assert board.state.applied_search == "new"
    assert not board.state.loading


def test_stale_list_failure_is_discarded(make_issue):
    async def scenario():
        release_old = asyncio.Event()

        async def handler(request: httpx.Request):
            if request.url.params.get("search") == "old":
                await release_old.wait()
                return httpx.Response(500, json={"error": "boom"})
            return _page(make_issue(id="fresh"))

        board = RemoteDashboard("tester", _client(handler))
        board.set_search("old")
        slow = asyncio.create_task(board.submit_search())
        for _ in range(5):
            await asyncio.sleep(0)

        board.set_search("new")
        await board.submit_search()
        release_old.set()
        await slow
        await board.close()
        return board

    board = asyncio.run(scenario())
    assert [i.id for i in board.state.issues] == ["fresh"]
    assert board.state.last_error is None
    assert not board.state.loading


def test_http_failure_is_reported_as_storage_error():
    def handler(request: httpx.Request):
        return httpx.Response(503, json={"error": "down"})

    async def scenario():
        board = RemoteDashboard("tester", _client(handler))
        with pytest.raises(StorageError):
            await board.refresh()
        return board

    board = asyncio.run(scenario())
    assert "503" in board.state.last_error
    assert not board.state.loading


def test_save_puts_record_and_refreshes(make_issue):
    calls = []

    def handler(request: httpx.Request):
        calls.append((request.method, request.url.path))
        if request.method == "PUT":
            body = json.loads(request.content)
            assert body["title"] == "Renamed"
            assert body["project"] == {"id": "alpha-api", "name": "Alpha API"}
            return httpx.Response(204)
        return _page(make_issue())

    async def scenario():
        board = RemoteDashboard("tester", _client(handler))
        await board.refresh()
        board.open_view("i-1")
        board.edit(draft_service.set_field, "title", "Renamed")
        saved = await board.save()
        return board, saved

    board, saved = asyncio.run(scenario())
    assert saved.title == "Renamed"
    assert calls == [("GET", "/api/issues"), ("PUT", "/api/issues/i-1"), ("GET", "/api/issues")]
    assert not board.state.editor.is_open


def test_create_posts_without_client_id(reference):
    posted = []

    def handler(request: httpx.Request):
        if request.method == "POST":
            posted.append(json.loads(request.content))
            return httpx.Response(201, json={})
        return _page()

    async def scenario():
        board = RemoteDashboard("tester", _client(handler))
        board.state.reference = reference
        board.open_create()
        board.edit(draft_service.set_field, "title", "DB timeout")
        for name, kind in (("project", "projects"), ("reported_by", "users")):
            item = getattr(reference, kind)[0]
            board.edit(draft_service.set_field, name, Ref(item.id, item.name))
        board.edit(draft_service.set_field, "context", "batch")
        board.edit(draft_service.set_field, "problem_statement", "slow")
        return await board.save()

    saved = asyncio.run(scenario())
    assert saved.status == "Open"
    assert "id" not in posted[0]
    assert posted[0]["title"] == "DB timeout"


def test_late_save_result_is_ignored_after_discard(make_issue):
    async def scenario():
        release_put = asyncio.Event()

        async def handler(request: httpx.Request):
            if request.method == "PUT":
                await release_put.wait()
                return httpx.Response(204)
            return _page(make_issue())

        board = RemoteDashboard("tester", _client(handler))
        await board.refresh()
        board.open_view("i-1")
        pending = asyncio.create_task(board.save())
        for _ in range(5):
            await asyncio.sleep(0)

        board.discard()
        board.open_view("i-1")
        token = board.state.editor.token
        release_put.set()
        result = await pending
        return board, result, token

    board, result, token = asyncio.run(scenario())
    assert result is None
    # the newer session survives the stale completion
    assert board.state.editor.is_open
    assert board.state.editor.token == token


def test_delete_calls_endpoint(make_issue):
    calls = []

    def handler(request: httpx.Request):
        calls.append((request.method, request.url.path))
        return _page(make_issue()) if request.method == "GET" else httpx.Response(204)

    async def scenario():
        board = RemoteDashboard("tester", _client(handler))
        await board.refresh()
        board.open_view("i-1")
        return await board.delete()

    assert asyncio.run(scenario()) is True
    assert ("DELETE", "/api/issues/i-1") in calls
