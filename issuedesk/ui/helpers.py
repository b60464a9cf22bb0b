"""
helpers.py - UI helper functions
Single responsibility: small formatting and option-building helpers used across UI.
"""
import getpass

import flet as ft

from issuedesk.config import (
    COLOR_DANGER,
    COLOR_STATUS,
    COLOR_TEXT_MUTED,
    CURRENT_USER_FALLBACK,
)
from issuedesk.domain.models import Ref
from issuedesk.domain.reference import ReferenceData
from issuedesk.services import summary_service


def current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return CURRENT_USER_FALLBACK


def status_color(status: str) -> str:
    return COLOR_STATUS.get(status, COLOR_TEXT_MUTED)


def status_icon(status: str) -> str:
    if status == "Resolved":
        return ft.Icons.CHECK_CIRCLE
    if status == "In Process":
        return ft.Icons.AUTORENEW
    return ft.Icons.ADJUST


def risk_color(score: int) -> str:
    return COLOR_DANGER if summary_service.is_high_risk(score) else COLOR_TEXT_MUTED


def ref_options(reference: ReferenceData, kind: str, blank: str | None = None) -> list[ft.dropdown.Option]:
    options = [ft.dropdown.Option(key="", text=blank)] if blank is not None else []
    options += [ft.dropdown.Option(key=i.id, text=i.name) for i in getattr(reference, kind)]
    return options


def text_options(values: list[str]) -> list[ft.dropdown.Option]:
    return [ft.dropdown.Option(key=v, text=v) for v in values]


def to_ref(reference: ReferenceData, kind: str, item_id: str | None) -> Ref | None:
    """Dropdown key back to a Ref; unknown ids keep the id as display name."""
    if not item_id:
        return None
    return Ref(id=item_id, name=reference.name_of(kind, item_id))


def parse_effort(text: str | None) -> float:
    try:
        return max(float(text or 0), 0)
    except ValueError:
        return 0
