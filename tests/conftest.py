"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import issuedesk` works.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from issuedesk.domain.models import Issue, Ref  # noqa: E402
from issuedesk.domain.reference import default_reference_data  # noqa: E402


@pytest.fixture
def reference():
    return default_reference_data()


@pytest.fixture
def make_issue():
    """Factory for a valid, fully populated issue; override any field by keyword."""

    def _make(**overrides) -> Issue:
        values = dict(
            id="i-1",
            title="Checkout errors",
            status="Open",
            stage=Ref("triage", "Triage"),
            project=Ref("alpha-api", "Alpha API"),
            environment="Production",
            issue_type=Ref("bug", "Bug"),
            reported_by=Ref("alice-engineer", "Alice Engineer"),
            reported_at="2024-03-10T09:30",
            assignee=Ref("bob-manager", "Bob Manager"),
            context="Seen after deploy",
            problem_statement="Checkout returns 500",
        )
        values.update(overrides)
        return Issue(**values)

    return _make
