"""
filters.py - Filter DTOs
Single responsibility: carry filter inputs for queries.
"""
from dataclasses import dataclass, field, fields, replace

# Multi-valued dimensions, in the order the filter panel shows them
MULTI_KEYS: tuple[str, ...] = (
    "project",
    "environment",
    "issue_type",
    "status",
    "stage",
    "root_cause",
    "risks",
    "assignees",
)
DATE_KEYS: tuple[str, ...] = (
    "reported_start",
    "reported_end",
    "resolved_start",
    "resolved_end",
)


@dataclass(frozen=True)
class IssueFilter:
    """Reference dimensions hold ``Ref.id`` values; status/environment hold enum values."""

    project: tuple[str, ...] = ()
    environment: tuple[str, ...] = ()
    issue_type: tuple[str, ...] = ()
    status: tuple[str, ...] = ()
    stage: tuple[str, ...] = ()
    root_cause: tuple[str, ...] = ()
    risks: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()
    reported_start: str | None = None
    reported_end: str | None = None
    resolved_start: str | None = None
    resolved_end: str | None = None

    def with_value(self, key: str, value) -> "IssueFilter":
        if key in MULTI_KEYS:
            value = tuple(dict.fromkeys(value or ()))
        elif key in DATE_KEYS:
            value = value or None
        else:
            raise KeyError(f"Unknown filter: {key}")
        return replace(self, **{key: value})

    def is_empty(self) -> bool:
        return all(not getattr(self, f.name) for f in fields(self))

    def active_count(self) -> int:
        return sum(1 for f in fields(self) if getattr(self, f.name))


@dataclass
class FilterState:
    """Two-phase filter model: ``pending`` is being edited, ``applied`` is in effect."""

    pending: IssueFilter = field(default_factory=IssueFilter)
    applied: IssueFilter = field(default_factory=IssueFilter)

    @property
    def dirty(self) -> bool:
        return self.pending != self.applied
