"""
views.py - Dashboard view builder
Single responsibility: render the issue dashboard from the coordinator state.
"""
import asyncio
import logging

import flet as ft

from issuedesk.config import (
    APP_TITLE,
    BORDER_RADIUS_BTN,
    BORDER_RADIUS_CARD,
    COLOR_APPBAR_BG,
    COLOR_APPBAR_FG,
    COLOR_BG,
    COLOR_BORDER,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_PRIMARY,
    COLOR_TEXT_MAIN,
    COLOR_TEXT_MUTED,
    PAGE_SIZE_OPTIONS,
    SEARCH_DEBOUNCE_SECONDS,
)
from issuedesk.dashboard import Dashboard, LocalDashboard
from issuedesk.domain.filters import DATE_KEYS, MULTI_KEYS
from issuedesk.domain.reference import ENVIRONMENTS, STATUS_FLOW
from issuedesk.services import pagination_service
from issuedesk.ui.components.issue_card import IssueListCard
from issuedesk.ui.components.status_tile import StatusTile

logger = logging.getLogger(__name__)

FILTER_LABELS = {
    "project": "Project",
    "environment": "Environment",
    "issue_type": "Issue Type",
    "status": "Status",
    "stage": "Stage",
    "root_cause": "Root Cause",
    "risks": "Risks",
    "assignees": "Assignee",
    "reported_start": "Reported from",
    "reported_end": "Reported to",
    "resolved_start": "Resolved from",
    "resolved_end": "Resolved to",
}

# filter key -> ReferenceData attribute (None: fixed enum)
_FILTER_SOURCES = {
    "project": "projects",
    "environment": None,
    "issue_type": "issue_types",
    "status": None,
    "stage": "stages",
    "root_cause": "root_causes",
    "risks": "risks",
    "assignees": "users",
}


def filter_choices(dashboard: Dashboard, key: str) -> list[tuple[str, str]]:
    """(value, label) pairs offered for one filter dimension."""
    if key == "environment":
        return [(v, v) for v in ENVIRONMENTS]
    if key == "status":
        return [(v, v) for v in STATUS_FLOW]
    return [(i.id, i.name) for i in getattr(dashboard.state.reference, _FILTER_SOURCES[key])]


def build_appbar(user: str, on_new_issue, on_export) -> ft.AppBar:
    return ft.AppBar(
        title=ft.Text(APP_TITLE, weight=ft.FontWeight.BOLD, color=COLOR_APPBAR_FG),
        bgcolor=COLOR_APPBAR_BG,
        actions=[
            ft.Text(user, size=12, color=COLOR_TEXT_MUTED),
            ft.TextButton(
                "Export CSV",
                icon=ft.Icons.DOWNLOAD,
                on_click=lambda _e: on_export(),
            ),
            ft.FilledButton(
                "New Issue",
                icon=ft.Icons.ADD,
                bgcolor=COLOR_PRIMARY,
                color="white",
                on_click=lambda _e: on_new_issue(),
            ),
            ft.Container(width=12),
        ],
    )


def build_dashboard_view(
    page: ft.Page,
    dashboard: Dashboard,
    user: str,
    filters_open: bool,
    dispatch,
    on_rerender,
    on_toggle_filters,
    on_new_issue,
    on_select_issue,
    on_export,
) -> ft.View:
    """
    Build the dashboard.

    ``dispatch(coro_fn, *args)`` runs a coordinator coroutine and re-renders;
    ``on_rerender()`` re-renders after a synchronous state change.
    """
    state = dashboard.state
    live_search = isinstance(dashboard, LocalDashboard)
    search_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Summary tiles
    # ------------------------------------------------------------------
    counts = dashboard.status_counts()
    selected_statuses = state.filters.applied.status
    tiles = ft.Row(
        controls=[
            StatusTile(
                status,
                counts.get(status, 0),
                selected=selected_statuses == (status,),
                on_click_callback=lambda s: dispatch(dashboard.apply_status_shortcut, s),
            )
            for status in STATUS_FLOW
        ],
        spacing=12,
    )
    scope_note = ft.Text(
        "Counts cover all matching issues"
        if dashboard.counts_scope == "filtered"
        else "Counts cover the current page only",
        size=11,
        color=COLOR_TEXT_MUTED,
    )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    async def _debounced_search(term_snapshot: str):
        try:
            await asyncio.sleep(SEARCH_DEBOUNCE_SECONDS)
        except asyncio.CancelledError:
            return
        if term_snapshot == dashboard.state.search:
            on_rerender()

    def on_search_change(e):
        nonlocal search_task
        dashboard.set_search(e.control.value or "")
        if not live_search:
            return
        if search_task and not search_task.done():
            search_task.cancel()

        async def runner(term: str):
            await _debounced_search(term)

        search_task = page.run_task(runner, dashboard.state.search)

    def on_search_submit(_e):
        if not live_search:
            dispatch(dashboard.submit_search)

    search_field = ft.TextField(
        prefix_icon=ft.Icons.SEARCH,
        hint_text="Search title, ID or project..."
        if live_search
        else "Search title, ID or project (Enter to search)",
        value=state.search,
        autofocus=bool(state.search),
        on_change=on_search_change,
        on_submit=on_search_submit,
        border_radius=BORDER_RADIUS_BTN,
        border_color="transparent",
        bgcolor=COLOR_CARD,
        content_padding=ft.Padding.symmetric(horizontal=12, vertical=12),
        text_size=14,
        expand=True,
    )

    active = state.filters.applied.active_count()
    filter_toggle = ft.OutlinedButton(
        f"Filters ({active})" if active else "Filters",
        icon=ft.Icons.FILTER_LIST,
        on_click=lambda _e: on_toggle_filters(),
    )

    # ------------------------------------------------------------------
    # Filter panel (pending until Apply)
    # ------------------------------------------------------------------
    def build_filter_panel() -> ft.Container:
        pending = state.filters.pending

        def toggle(key: str, value: str):
            current = list(getattr(dashboard.state.filters.pending, key))
            if value in current:
                current.remove(value)
            else:
                current.append(value)
            dashboard.update_filter(key, current)
            on_rerender()

        def chip_row(key: str) -> ft.Column:
            selected = getattr(pending, key)
            return ft.Column(
                controls=[
                    ft.Text(FILTER_LABELS[key], size=12, weight=ft.FontWeight.W_600, color=COLOR_TEXT_MAIN),
                    ft.Row(
                        controls=[
                            ft.Chip(
                                label=ft.Text(label, size=12),
                                selected=value in selected,
                                on_select=lambda _e, k=key, v=value: toggle(k, v),
                            )
                            for value, label in filter_choices(dashboard, key)
                        ],
                        spacing=4,
                        run_spacing=4,
                        wrap=True,
                    ),
                ],
                spacing=4,
            )

        def date_field(key: str) -> ft.TextField:
            return ft.TextField(
                label=FILTER_LABELS[key],
                hint_text="YYYY-MM-DD",
                value=getattr(pending, key) or "",
                on_change=lambda e, k=key: dashboard.update_filter(k, (e.control.value or "").strip()),
                border_color=COLOR_BORDER,
                focused_border_color=COLOR_PRIMARY,
                border_radius=BORDER_RADIUS_BTN,
                text_size=13,
                width=170,
            )

        return ft.Container(
            content=ft.Column(
                controls=[
                    *(chip_row(key) for key in MULTI_KEYS),
                    ft.Row(controls=[date_field(key) for key in DATE_KEYS], spacing=8, wrap=True),
                    ft.Row(
                        controls=[
                            ft.TextButton(
                                "Reset",
                                icon=ft.Icons.CLEAR_ALL,
                                on_click=lambda _e: dispatch(dashboard.reset_filters),
                            ),
                            ft.FilledButton(
                                "Apply Filters",
                                icon=ft.Icons.CHECK,
                                bgcolor=COLOR_PRIMARY,
                                color="white",
                                on_click=lambda _e: dispatch(dashboard.apply_filters),
                            ),
                        ],
                        alignment=ft.MainAxisAlignment.END,
                    ),
                ],
                spacing=12,
            ),
            padding=ft.Padding.all(16),
            bgcolor=COLOR_CARD,
            border_radius=BORDER_RADIUS_CARD,
            border=ft.border.all(1, COLOR_BORDER),
        )

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------
    rows = dashboard.visible_rows()
    if rows:
        list_controls = [
            IssueListCard(issue, state.reference, on_click_callback=on_select_issue)
            for issue in rows
        ]
    else:
        list_controls = [
            ft.Container(
                content=ft.Column(
                    [
                        ft.Icon(ft.Icons.INBOX, size=64, color="#d0d7de"),
                        ft.Text("No issues match the current filters", color=COLOR_TEXT_MUTED, size=16),
                    ],
                    horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                ),
                alignment=ft.Alignment.CENTER,
                padding=60,
            )
        ]

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------
    pagination = state.pagination
    pages = dashboard.total_pages()

    def on_limit_change(e):
        dispatch(dashboard.change_limit, int(e.control.value))

    pager = ft.Row(
        controls=[
            ft.Text("Rows per page", size=12, color=COLOR_TEXT_MUTED),
            ft.Dropdown(
                value=str(pagination.limit),
                options=[ft.dropdown.Option(key=str(n), text=str(n)) for n in PAGE_SIZE_OPTIONS],
                on_select=on_limit_change,
                width=110,
                text_size=13,
                border_color=COLOR_BORDER,
            ),
            ft.Text(
                pagination_service.range_label(pagination, dashboard.result_count()),
                size=12,
                color=COLOR_TEXT_MUTED,
            ),
            ft.IconButton(
                icon=ft.Icons.CHEVRON_LEFT,
                tooltip="Previous page",
                disabled=pagination.page <= 1,
                on_click=lambda _e: dispatch(dashboard.go_to_page, pagination.page - 1),
            ),
            ft.Text(f"Page {pagination.page} of {pages}", size=12, color=COLOR_TEXT_MAIN),
            ft.IconButton(
                icon=ft.Icons.CHEVRON_RIGHT,
                tooltip="Next page",
                disabled=pagination.page >= pages,
                on_click=lambda _e: dispatch(dashboard.go_to_page, pagination.page + 1),
            ),
        ],
        alignment=ft.MainAxisAlignment.END,
        vertical_alignment=ft.CrossAxisAlignment.CENTER,
    )

    banner = []
    if state.last_error:
        banner.append(
            ft.Container(
                content=ft.Row(
                    [
                        ft.Icon(ft.Icons.ERROR_OUTLINE, color=COLOR_DANGER),
                        ft.Text(state.last_error, color=COLOR_DANGER, size=13, expand=True),
                        ft.TextButton("Retry", on_click=lambda _e: dispatch(dashboard.refresh)),
                    ]
                ),
                padding=ft.Padding.symmetric(horizontal=12, vertical=8),
                bgcolor="#FEF2F2",
                border_radius=BORDER_RADIUS_BTN,
            )
        )
    if state.loading:
        banner.append(ft.ProgressBar(color=COLOR_PRIMARY))

    body = ft.Column(
        controls=[
            *banner,
            tiles,
            scope_note,
            ft.Row(controls=[search_field, filter_toggle], spacing=8),
            *([build_filter_panel()] if filters_open else []),
            ft.Column(controls=list_controls, spacing=0),
            pager,
        ],
        spacing=12,
        scroll=ft.ScrollMode.AUTO,
        expand=True,
    )

    return ft.View(
        route="/",
        appbar=build_appbar(user, on_new_issue, on_export),
        bgcolor=COLOR_BG,
        padding=ft.Padding.symmetric(horizontal=24, vertical=16),
        controls=[body],
    )
