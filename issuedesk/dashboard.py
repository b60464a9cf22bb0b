"""
dashboard.py - Application coordinator
Single responsibility: own the AppState and route user intents through the
pure services, talking to exactly one storage collaborator.

LocalDashboard filters in-process over the full snapshot; RemoteDashboard
delegates filtering and paging to the REST API. A coordinator never mixes
the two modes.
"""
import logging
from dataclasses import replace

from issuedesk import config
from issuedesk.api.client import IssueApiClient
from issuedesk.database.repositories import issues as issue_repo
from issuedesk.database.schema import initialize_schema
from issuedesk.domain.errors import EditorStateError, StorageError
from issuedesk.domain.models import Issue, Ref
from issuedesk.domain.reference import default_reference_data
from issuedesk.services import (
    draft_service,
    export_service,
    filter_service,
    issue_service,
    pagination_service,
    summary_service,
)
from issuedesk.state import AppState, EditorMode

logger = logging.getLogger(__name__)


class Dashboard:
    counts_scope = "filtered"
    # local record lists are authoritative; a remote page may not hold the edited record
    require_existing = True

    def __init__(self, user: str, record_audit: bool = config.CLIENT_AUDIT):
        self.user = user
        self.record_audit = record_audit
        self.state = AppState()

    # ------------------------------------------------------------------
    # Mode specific
    # ------------------------------------------------------------------

    async def load(self) -> None:
        raise NotImplementedError

    async def refresh(self) -> bool:
        raise NotImplementedError

    def filtered(self) -> list[Issue]:
        raise NotImplementedError

    def result_count(self) -> int:
        raise NotImplementedError

    def visible_rows(self) -> list[Issue]:
        raise NotImplementedError

    def status_counts(self) -> dict[str, int]:
        raise NotImplementedError

    async def _store_save(self, issues: list[Issue], final: Issue, is_creating: bool) -> None:
        raise NotImplementedError

    async def _store_delete(self, issues: list[Issue], issue_id: str) -> None:
        raise NotImplementedError

    async def _after_store(self, issues: list[Issue]) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def total_pages(self) -> int:
        return pagination_service.total_pages(self.result_count(), self.state.pagination.limit)

    async def go_to_page(self, page: int) -> bool:
        current = self.state.pagination
        moved = pagination_service.go_to_page(current, page, self.total_pages())
        if moved == current:
            return False
        self.state.pagination = moved
        await self.refresh()
        return True

    async def change_limit(self, limit: int) -> None:
        self.state.pagination = pagination_service.change_limit(self.state.pagination, limit)
        await self.refresh()

    # ------------------------------------------------------------------
    # Search & filters
    # ------------------------------------------------------------------

    def set_search(self, term: str) -> None:
        self.state.search = term or ""

    async def submit_search(self) -> None:
        self.state = replace(
            self.state,
            applied_search=self.state.search,
            pagination=pagination_service.reset_page(self.state.pagination),
        )
        await self.refresh()

    def update_filter(self, key: str, value) -> None:
        self.state = filter_service.update_pending(self.state, key, value)

    async def apply_filters(self) -> None:
        self.state = filter_service.apply(self.state)
        await self.refresh()

    async def reset_filters(self) -> None:
        self.state = filter_service.reset(self.state)
        await self.refresh()

    async def apply_status_shortcut(self, status: str) -> None:
        self.state = filter_service.status_shortcut(self.state, status)
        await self.refresh()

    # ------------------------------------------------------------------
    # Editing session
    # ------------------------------------------------------------------

    @property
    def draft(self) -> Issue | None:
        return self.state.editor.draft

    def open_create(self) -> Issue:
        self.state.editor = issue_service.open_create(
            self.state.editor, self.state.reference, record_audit=self.record_audit
        )
        return self.state.editor.draft

    def open_view(self, issue_id: str) -> Issue:
        self.state.editor = issue_service.open_view(self.state.editor, self.state.issues, issue_id)
        return self.state.editor.draft

    def edit(self, fn, *args, **kwargs) -> Issue:
        self.state.editor = issue_service.edit(self.state.editor, fn, *args, **kwargs)
        return self.state.editor.draft

    def set_status(self, status: str) -> Issue:
        return self.edit(draft_service.set_status, status, record_audit=self.record_audit)

    def set_stage(self, stage: Ref) -> Issue:
        return self.edit(draft_service.set_stage, stage, record_audit=self.record_audit)

    def update_risks(self, risks) -> Issue:
        return self.edit(draft_service.update_risks, risks, self.state.reference)

    def add_comment(self, text: str) -> Issue:
        return self.edit(draft_service.add_comment, text, self.user)

    def discard(self) -> None:
        """Drop the draft; the record store is left untouched."""
        self.state.editor = issue_service.close_session(self.state.editor)

    def _live(self, token: int) -> bool:
        return self.state.editor.is_open and self.state.editor.token == token

    async def save(self) -> Issue | None:
        """Validate and commit the draft.

        Raises ValidationError (draft kept) or StorageError (nothing committed).
        Returns None when the session was discarded while the write was in flight.
        """
        session = self.state.editor
        if not session.is_open or session.draft is None:
            raise EditorStateError("No draft is open")
        if self.state.saving:
            raise EditorStateError("A save is already in progress")
        new_issues, final = issue_service.commit(
            self.state.issues,
            session.draft,
            session.is_creating,
            reference=self.state.reference,
            record_audit=self.record_audit,
            require_existing=self.require_existing,
        )
        self.state.saving = True
        try:
            await self._store_save(new_issues, final, session.is_creating)
        finally:
            self.state.saving = False
        if not self._live(session.token):
            logger.info("Editing session closed before save of %s completed; result discarded", final.id)
            return None
        logger.info("%s issue %s", "Created" if session.is_creating else "Updated", final.id)
        self.state.editor = issue_service.close_session(self.state.editor)
        await self._after_store(new_issues)
        return final

    async def delete(self) -> bool:
        session = self.state.editor
        if session.mode != EditorMode.EDITING or session.issue_id is None:
            raise EditorStateError("Only a stored issue can be deleted")
        issue_id = session.issue_id
        new_issues = issue_service.remove_issue(self.state.issues, issue_id, self.require_existing)
        await self._store_delete(new_issues, issue_id)
        if not self._live(session.token):
            logger.info("Editing session closed before delete of %s completed; result discarded", issue_id)
            return False
        logger.info("Deleted issue %s", issue_id)
        self.state.editor = issue_service.close_session(self.state.editor)
        await self._after_store(new_issues)
        return True

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_csv(self) -> str | None:
        return export_service.to_csv(self.filtered(), self.state.reference)


class LocalDashboard(Dashboard):
    """Client-side filtering over the full persisted snapshot."""

    counts_scope = "filtered"

    def __init__(self, user: str, db_path: str | None = None, record_audit: bool = config.CLIENT_AUDIT):
        super().__init__(user, record_audit=record_audit)
        self.db_path = db_path

    async def load(self) -> None:
        initialize_schema(self.db_path)
        reference = default_reference_data()
        issues = issue_repo.load_issues(self.db_path)
        # the score is derived; never trust a stored value
        issues = [issue_service.resolve_references(i, reference) for i in issues]
        self.state = replace(self.state, issues=issues, total=len(issues), reference=reference)

    async def refresh(self) -> bool:
        self.state.total = len(self.state.issues)
        self.state.pagination = pagination_service.clamp(self.state.pagination, self.total_pages())
        return True

    def set_search(self, term: str) -> None:
        # live: narrows on every keystroke
        term = term or ""
        self.state = replace(
            self.state,
            search=term,
            applied_search=term,
            pagination=pagination_service.reset_page(self.state.pagination),
        )

    def filtered(self) -> list[Issue]:
        return filter_service.filter_issues(
            self.state.issues, self.state.filters.applied, self.state.applied_search
        )

    def result_count(self) -> int:
        return len(self.filtered())

    def visible_rows(self) -> list[Issue]:
        rows, _ = pagination_service.paginate(
            self.filtered(), self.state.pagination.page, self.state.pagination.limit
        )
        return rows

    def status_counts(self) -> dict[str, int]:
        return summary_service.count_by_status(self.filtered())

    async def _store_save(self, issues: list[Issue], final: Issue, is_creating: bool) -> None:
        issue_repo.save_issues(issues, self.db_path)

    async def _store_delete(self, issues: list[Issue], issue_id: str) -> None:
        issue_repo.save_issues(issues, self.db_path)

    async def _after_store(self, issues: list[Issue]) -> None:
        self.state.issues = issues
        await self.refresh()


class RemoteDashboard(Dashboard):
    """Server-side filtering: the record list is always the last accepted page."""

    require_existing = False

    def __init__(self, user: str, api: IssueApiClient, record_audit: bool = config.CLIENT_AUDIT):
        super().__init__(user, record_audit=record_audit)
        self.api = api
        self._request_seq = 0

    @property
    def counts_scope(self) -> str:
        return "filtered" if self.state.status_counts is not None else "page"

    async def load(self) -> None:
        self.state.reference = await self.api.load_reference_data()
        await self.refresh()

    async def refresh(self) -> bool:
        """Fetch the current page; responses superseded by a newer request are dropped."""
        self._request_seq += 1
        seq = self._request_seq
        params = filter_service.to_query_params(
            self.state.filters.applied,
            self.state.applied_search,
            self.state.pagination.page,
            self.state.pagination.limit,
        )
        self.state.loading = True
        try:
            result = await self.api.list_issues(params)
        except StorageError as e:
            if seq != self._request_seq:
                logger.debug("Discarding stale list failure #%s (latest #%s): %s", seq, self._request_seq, e)
                return False
            self.state.loading = False
            self.state.last_error = str(e)
            raise
        if seq != self._request_seq:
            logger.debug("Discarding stale list response #%s (latest #%s)", seq, self._request_seq)
            return False
        self.state = replace(
            self.state,
            issues=result.issues,
            total=result.total,
            status_counts=summary_service.merge_server_counts(result.status_counts),
            loading=False,
            last_error=None,
        )
        return True

    def filtered(self) -> list[Issue]:
        return list(self.state.issues)

    def result_count(self) -> int:
        return self.state.total

    def visible_rows(self) -> list[Issue]:
        return list(self.state.issues)

    def status_counts(self) -> dict[str, int]:
        if self.state.status_counts is not None:
            return dict(self.state.status_counts)
        return summary_service.count_by_status(self.state.issues)

    async def _store_save(self, issues: list[Issue], final: Issue, is_creating: bool) -> None:
        if is_creating:
            await self.api.create_issue(final)
        else:
            await self.api.update_issue(final)

    async def _store_delete(self, issues: list[Issue], issue_id: str) -> None:
        await self.api.delete_issue(issue_id)

    async def _after_store(self, issues: list[Issue]) -> None:
        await self.refresh()

    async def close(self) -> None:
        await self.api.close()


def create_dashboard(user: str) -> Dashboard:
    if config.BACKEND == "remote":
        api = IssueApiClient(config.API_URL, token=config.API_TOKEN, timeout=config.API_TIMEOUT)
        return RemoteDashboard(user, api)
    return LocalDashboard(user)
