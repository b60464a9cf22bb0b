"""
state.py - Application state container
Single responsibility: hold every piece of page-level state in one explicit object.
"""
from dataclasses import dataclass, field
from enum import Enum

from issuedesk.config import DEFAULT_PAGE_SIZE
from issuedesk.domain.filters import FilterState
from issuedesk.domain.models import Issue
from issuedesk.domain.reference import ReferenceData


@dataclass(frozen=True)
class Pagination:
    page: int = 1  # 1-based
    limit: int = DEFAULT_PAGE_SIZE


class EditorMode(str, Enum):
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"


@dataclass(frozen=True)
class EditorSession:
    """Tagged editing state: Closed | Creating | Editing(issue_id).

    ``token`` changes on every open so late storage results can tell whether
    the session they belong to is still the live one.
    """

    mode: EditorMode = EditorMode.CLOSED
    draft: Issue | None = None
    issue_id: str | None = None
    token: int = 0

    @property
    def is_open(self) -> bool:
        return self.mode != EditorMode.CLOSED

    @property
    def is_creating(self) -> bool:
        return self.mode == EditorMode.CREATING


@dataclass
class AppState:
    issues: list[Issue] = field(default_factory=list)
    total: int = 0
    search: str = ""  # term being typed
    applied_search: str = ""  # term in effect (remote mode defers the typed term)
    filters: FilterState = field(default_factory=FilterState)
    pagination: Pagination = field(default_factory=Pagination)
    editor: EditorSession = field(default_factory=EditorSession)
    reference: ReferenceData = field(default_factory=ReferenceData)
    status_counts: dict[str, int] | None = None
    loading: bool = False
    saving: bool = False
    last_error: str | None = None
