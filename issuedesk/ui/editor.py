"""
editor.py - Issue editor dialog
Single responsibility: drive one editing session (create or view/edit) in a modal.
"""
import logging

import flet as ft

from issuedesk.config import (
    BORDER_RADIUS_BTN,
    BORDER_RADIUS_CARD,
    COLOR_BG,
    COLOR_BORDER,
    COLOR_CARD,
    COLOR_DANGER,
    COLOR_PRIMARY,
    COLOR_TEXT_MAIN,
    COLOR_TEXT_MUTED,
)
from issuedesk.dashboard import Dashboard
from issuedesk.domain.errors import (
    EditorStateError,
    EscalationPendingError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from issuedesk.domain.reference import ENVIRONMENTS, LAYER_STATUSES, STATUS_FLOW
from issuedesk.services import draft_service
from issuedesk.ui.components.comment_form import CommentForm
from issuedesk.ui.helpers import (
    parse_effort,
    ref_options,
    risk_color,
    status_color,
    text_options,
    to_ref,
)
from issuedesk.utils.time import format_datetime

logger = logging.getLogger(__name__)

FIELD_LABELS = {
    "title": "Title",
    "project": "Project",
    "environment": "Environment",
    "issue_type": "Issue Type",
    "reported_by": "Reported By",
    "reported_at": "Reported At",
    "context": "Context",
    "problem_statement": "Problem Statement",
}

SECTIONS = ("Overview", "Escalation", "Resolutions", "Activity")


def _field_style() -> dict:
    return dict(
        border_color=COLOR_BORDER,
        focused_border_color=COLOR_PRIMARY,
        border_radius=BORDER_RADIUS_BTN,
        text_size=13,
    )


def show_issue_dialog(page: ft.Page, dashboard: Dashboard, on_closed):
    """Open the editor for the session already started on ``dashboard``.

    ``on_closed()`` fires after the session ends (saved, deleted or discarded).
    """
    reference = dashboard.state.reference
    creating = dashboard.state.editor.is_creating
    section = SECTIONS[0]
    error_text = ft.Text("", color=COLOR_DANGER, size=12)
    body = ft.Container(width=860, height=560)

    def draft():
        return dashboard.draft

    def show_error(message: str):
        error_text.value = message
        page.update()

    def refresh():
        body.content = build_section()
        dialog.title = build_title()
        page.update()

    def mutate(fn, *args, rerender: bool = True, **kwargs):
        try:
            dashboard.edit(fn, *args, **kwargs)
        except (EscalationPendingError, NotFoundError) as exc:
            show_error(str(exc))
            return
        except EditorStateError:
            logger.warning("Edit ignored: no draft is open")
            return
        error_text.value = ""
        if rerender:
            refresh()

    def set_plain(name: str, value):
        mutate(draft_service.set_field, name, value, rerender=False)

    def set_ref(name: str, kind: str, item_id: str | None):
        mutate(draft_service.set_field, name, to_ref(reference, kind, item_id), rerender=False)

    def confirm(title: str, message: str, on_yes):
        def close_dialog(_e=None):
            confirm_dlg.open = False
            page.update()

        def do_yes(_e=None):
            close_dialog()
            on_yes()

        confirm_dlg = ft.AlertDialog(
            modal=True,
            title=ft.Text(title),
            content=ft.Text(message),
            actions=[
                ft.TextButton("Cancel", on_click=close_dialog),
                ft.FilledButton("Delete", bgcolor=COLOR_DANGER, color="white", on_click=do_yes),
            ],
            actions_alignment=ft.MainAxisAlignment.END,
        )
        page.overlay.append(confirm_dlg)
        confirm_dlg.open = True
        page.update()

    # ------------------------------------------------------------------
    # Overview
    # ------------------------------------------------------------------
    def build_overview() -> ft.Control:
        d = draft()

        def text(name: str, label: str, multiline: bool = False) -> ft.TextField:
            return ft.TextField(
                label=label,
                value=getattr(d, name) or "",
                multiline=multiline,
                min_lines=3 if multiline else 1,
                max_lines=8 if multiline else 1,
                on_change=lambda e, n=name: set_plain(n, e.control.value),
                **_field_style(),
            )

        def ref_dropdown(name: str, kind: str, label: str, blank: str | None = None) -> ft.Dropdown:
            current = getattr(d, name)
            return ft.Dropdown(
                label=label,
                value=current.id if current else "",
                options=ref_options(reference, kind, blank),
                on_select=lambda e, n=name, k=kind: set_ref(n, k, e.control.value),
                expand=True,
                **_field_style(),
            )

        def on_status(e):
            mutate(draft_service.set_status, e.control.value, record_audit=dashboard.record_audit)

        def on_stage(e):
            stage = to_ref(reference, "stages", e.control.value)
            if stage is not None:
                mutate(draft_service.set_stage, stage, record_audit=dashboard.record_audit)

        def on_risk_toggle(risk_id: str):
            risks = list(draft().risks)
            if risk_id in risks:
                risks.remove(risk_id)
            else:
                risks.append(risk_id)
            mutate(draft_service.update_risks, risks, reference)

        status_row = ft.Row(
            controls=[
                ft.Dropdown(
                    label="Status",
                    value=d.status,
                    options=text_options(STATUS_FLOW),
                    on_select=on_status,
                    expand=True,
                    **_field_style(),
                ),
                ft.Dropdown(
                    label="Stage",
                    value=d.stage.id if d.stage else "",
                    options=ref_options(reference, "stages"),
                    on_select=on_stage,
                    expand=True,
                    **_field_style(),
                ),
                ft.Text(
                    f"Closed {format_datetime(d.closed_at)}" if d.closed_at else "",
                    size=12,
                    color=COLOR_TEXT_MUTED,
                ),
            ],
            spacing=8,
        )

        risk_chips = ft.Row(
            controls=[
                ft.Chip(
                    label=ft.Text(f"{item.name} ({reference.risk_weight(item.id)})", size=12),
                    selected=item.id in d.risks,
                    on_select=lambda _e, rid=item.id: on_risk_toggle(rid),
                )
                for item in reference.risks
            ],
            spacing=4,
            run_spacing=4,
            wrap=True,
        )

        return ft.Column(
            controls=[
                text("title", "Title *"),
                ft.Row(
                    controls=[
                        ref_dropdown("project", "projects", "Project *", blank="(none)"),
                        ft.Dropdown(
                            label="Environment *",
                            value=d.environment or "",
                            options=text_options(ENVIRONMENTS),
                            on_select=lambda e: set_plain("environment", e.control.value),
                            expand=True,
                            **_field_style(),
                        ),
                        ref_dropdown("issue_type", "issue_types", "Issue Type *", blank="(none)"),
                    ],
                    spacing=8,
                ),
                ft.Row(
                    controls=[
                        ref_dropdown("reported_by", "users", "Reported By *", blank="(none)"),
                        ft.TextField(
                            label="Reported At *",
                            hint_text="YYYY-MM-DDTHH:MM",
                            value=d.reported_at or "",
                            on_change=lambda e: set_plain("reported_at", (e.control.value or "").strip() or None),
                            expand=True,
                            **_field_style(),
                        ),
                        ref_dropdown("assignee", "users", "Assignee", blank="Unassigned"),
                    ],
                    spacing=8,
                ),
                status_row,
                text("context", "Context *", multiline=True),
                text("problem_statement", "Problem Statement *", multiline=True),
                text("evidence", "Evidence", multiline=True),
                ft.Row(
                    controls=[
                        ft.Text("Risks", weight=ft.FontWeight.W_600, color=COLOR_TEXT_MAIN),
                        ft.Text(
                            f"Score {d.risk_score}",
                            weight=ft.FontWeight.BOLD,
                            color=risk_color(d.risk_score),
                        ),
                    ],
                    spacing=12,
                ),
                risk_chips,
                ref_dropdown("root_cause_category", "root_causes", "Root Cause Category", blank="(none)"),
                text("root_cause", "Root Cause Detail", multiline=True),
            ],
            spacing=12,
            scroll=ft.ScrollMode.AUTO,
        )

    # ------------------------------------------------------------------
    # Escalation layers
    # ------------------------------------------------------------------
    def build_escalation() -> ft.Control:
        d = draft()

        def layer_card(layer) -> ft.Container:
            member_ids = {s.person.id for s in layer.stakeholders}
            candidates = [u for u in reference.users if u.id not in member_ids]

            def on_add_member(e, lid=layer.id):
                person = to_ref(reference, "users", e.control.value)
                if person is not None:
                    mutate(draft_service.add_stakeholder, lid, person)

            stakeholder_rows = [
                ft.Row(
                    controls=[
                        ft.IconButton(
                            icon=ft.Icons.STAR if s.is_decision_maker else ft.Icons.STAR_BORDER,
                            icon_color=COLOR_PRIMARY if s.is_decision_maker else COLOR_TEXT_MUTED,
                            tooltip="Decision maker",
                            on_click=lambda _e, lid=layer.id, p=s.person: mutate(
                                draft_service.set_decision_maker, lid, p
                            ),
                        ),
                        ft.Text(s.person.display_name, size=13, expand=True),
                        ft.IconButton(
                            icon=ft.Icons.CLOSE,
                            tooltip="Remove stakeholder",
                            on_click=lambda _e, lid=layer.id, p=s.person: mutate(
                                draft_service.remove_stakeholder, lid, p
                            ),
                        ),
                    ],
                    spacing=4,
                )
                for s in layer.stakeholders
            ]

            return ft.Container(
                content=ft.Column(
                    controls=[
                        ft.Row(
                            controls=[
                                ft.Text(f"Layer {layer.layer}", weight=ft.FontWeight.BOLD, expand=True),
                                ft.Dropdown(
                                    value=layer.status,
                                    options=text_options(LAYER_STATUSES),
                                    on_select=lambda e, lid=layer.id: mutate(
                                        draft_service.set_layer_status, lid, e.control.value
                                    ),
                                    width=140,
                                    **_field_style(),
                                ),
                                ft.IconButton(
                                    icon=ft.Icons.DELETE_OUTLINE,
                                    icon_color=COLOR_DANGER,
                                    tooltip="Delete layer",
                                    on_click=lambda _e, lid=layer.id, n=layer.layer: confirm(
                                        "Delete escalation layer",
                                        f"Delete layer {n} and its stakeholders?",
                                        lambda: mutate(draft_service.delete_layer, lid),
                                    ),
                                ),
                            ],
                        ),
                        *stakeholder_rows,
                        ft.Dropdown(
                            label="Add stakeholder",
                            value=None,
                            options=[ft.dropdown.Option(key=u.id, text=u.name) for u in candidates],
                            on_select=on_add_member,
                            **_field_style(),
                        ),
                    ],
                    spacing=6,
                ),
                padding=ft.Padding.all(12),
                bgcolor=COLOR_CARD,
                border_radius=BORDER_RADIUS_CARD,
                border=ft.border.all(1, COLOR_BORDER),
            )

        can_add = draft_service.can_add_layer(d)
        return ft.Column(
            controls=[
                *(layer_card(layer) for layer in d.escalations),
                ft.Row(
                    controls=[
                        ft.OutlinedButton(
                            "Escalate",
                            icon=ft.Icons.ADD,
                            disabled=not can_add,
                            on_click=lambda _e: mutate(draft_service.add_layer),
                        ),
                        ft.Text(
                            "" if can_add else "Mark the current layer Done to escalate further",
                            size=12,
                            color=COLOR_TEXT_MUTED,
                        ),
                    ],
                ),
            ],
            spacing=10,
            scroll=ft.ScrollMode.AUTO,
        )

    # ------------------------------------------------------------------
    # Resolutions
    # ------------------------------------------------------------------
    def build_resolutions() -> ft.Control:
        d = draft()

        def res_field(res, name: str, label: str, multiline: bool = False) -> ft.TextField:
            return ft.TextField(
                label=label,
                value=str(res[name]),
                multiline=multiline,
                on_change=lambda e, rid=res.id, n=name: mutate(
                    draft_service.update_resolution_field, rid, n, e.control.value, rerender=False
                ),
                expand=True,
                **_field_style(),
            )

        def res_card(res) -> ft.Container:
            return ft.Container(
                content=ft.Column(
                    controls=[
                        ft.Row(
                            controls=[
                                ft.Checkbox(
                                    label="Agreed",
                                    value=res.is_agreed,
                                    on_change=lambda _e, rid=res.id: mutate(draft_service.toggle_agreement, rid),
                                ),
                                ft.Container(expand=True),
                                ft.IconButton(
                                    icon=ft.Icons.DELETE_OUTLINE,
                                    icon_color=COLOR_DANGER,
                                    tooltip="Delete proposal",
                                    on_click=lambda _e, rid=res.id: confirm(
                                        "Delete proposal",
                                        "Delete this resolution proposal?",
                                        lambda: mutate(draft_service.delete_resolution, rid),
                                    ),
                                ),
                            ],
                        ),
                        res_field(res, "solution", "Solution", multiline=True),
                        ft.Row(
                            controls=[
                                res_field(res, "pros", "Pros"),
                                res_field(res, "cons", "Cons"),
                            ],
                            spacing=8,
                        ),
                        ft.Row(
                            controls=[
                                res_field(res, "concerns", "Concerns"),
                                ft.TextField(
                                    label="Effort (man-hours)",
                                    value=str(res.effort),
                                    on_change=lambda e, rid=res.id: mutate(
                                        draft_service.update_resolution_field,
                                        rid,
                                        "effort",
                                        parse_effort(e.control.value),
                                        rerender=False,
                                    ),
                                    width=160,
                                    **_field_style(),
                                ),
                            ],
                            spacing=8,
                        ),
                    ],
                    spacing=8,
                ),
                padding=ft.Padding.all(12),
                bgcolor=COLOR_CARD,
                border_radius=BORDER_RADIUS_CARD,
                border=ft.border.all(2 if res.is_agreed else 1, COLOR_PRIMARY if res.is_agreed else COLOR_BORDER),
            )

        new_solution = ft.TextField(label="New proposal", expand=True, **_field_style())
        new_effort = ft.TextField(label="Effort", width=120, **_field_style())

        def on_add(_e):
            solution = (new_solution.value or "").strip()
            if not solution:
                return
            mutate(draft_service.add_resolution, solution, effort=parse_effort(new_effort.value))

        return ft.Column(
            controls=[
                *(res_card(res) for res in d.resolutions),
                ft.Row(
                    controls=[
                        new_solution,
                        new_effort,
                        ft.IconButton(icon=ft.Icons.ADD, icon_color=COLOR_PRIMARY, tooltip="Add proposal", on_click=on_add),
                    ],
                ),
            ],
            spacing=10,
            scroll=ft.ScrollMode.AUTO,
        )

    # ------------------------------------------------------------------
    # Comments and history
    # ------------------------------------------------------------------
    def build_activity() -> ft.Control:
        d = draft()
        comments = [
            ft.Container(
                content=ft.Column(
                    controls=[
                        ft.Text(
                            f"{c.user} ・ {format_datetime(c.timestamp)}",
                            size=11,
                            color=COLOR_TEXT_MUTED,
                        ),
                        ft.Text(c.text, size=13, selectable=True),
                    ],
                    spacing=2,
                ),
                padding=ft.Padding.all(10),
                bgcolor=COLOR_CARD,
                border_radius=BORDER_RADIUS_BTN,
            )
            for c in d.comments
        ]
        history = [
            ft.Row(
                controls=[
                    ft.Text(format_datetime(a.timestamp), size=11, color=COLOR_TEXT_MUTED, width=120),
                    ft.Text(a.action, size=12),
                ],
            )
            for a in draft_service.audit_history(d)
        ]
        return ft.Column(
            controls=[
                ft.Text("Comments", weight=ft.FontWeight.W_600),
                *comments,
                CommentForm(dashboard.user, on_submit=lambda text: mutate(draft_service.add_comment, text, dashboard.user)),
                ft.Divider(),
                ft.Text("History", weight=ft.FontWeight.W_600),
                *(history or [ft.Text("No history yet", size=12, color=COLOR_TEXT_MUTED)]),
            ],
            spacing=8,
            scroll=ft.ScrollMode.AUTO,
        )

    builders = {
        "Overview": build_overview,
        "Escalation": build_escalation,
        "Resolutions": build_resolutions,
        "Activity": build_activity,
    }

    def on_section(name: str):
        nonlocal section
        section = name
        refresh()

    def build_tab_btn(name: str) -> ft.Container:
        selected = section == name
        color = COLOR_PRIMARY if selected else COLOR_TEXT_MUTED
        return ft.Container(
            content=ft.Text(name, color=color, weight=ft.FontWeight.BOLD if selected else ft.FontWeight.NORMAL),
            padding=ft.Padding.symmetric(vertical=10, horizontal=18),
            border=ft.border.only(bottom=ft.BorderSide(2, COLOR_PRIMARY if selected else "transparent")),
            on_click=lambda _e: on_section(name),
            ink=True,
        )

    def build_section() -> ft.Control:
        return ft.Column(
            controls=[
                ft.Row(controls=[build_tab_btn(name) for name in SECTIONS], spacing=0),
                ft.Container(content=builders[section](), expand=True, bgcolor=COLOR_BG, padding=ft.Padding.all(8)),
            ],
            spacing=8,
            expand=True,
        )

    def build_title() -> ft.Control:
        d = draft()
        if d is None:
            return ft.Text("")
        return ft.Row(
            controls=[
                ft.Text("New Issue" if creating else f"Issue #{d.id[:8]}", weight=ft.FontWeight.BOLD),
                ft.Container(
                    content=ft.Text(d.status, size=11, color="white", weight=ft.FontWeight.BOLD),
                    bgcolor=status_color(d.status),
                    border_radius=12,
                    padding=ft.Padding.symmetric(horizontal=10, vertical=2),
                ),
            ],
            spacing=12,
        )

    # ------------------------------------------------------------------
    # Session end
    # ------------------------------------------------------------------
    def close(_e=None):
        dialog.open = False
        page.update()
        on_closed()

    def on_cancel(_e=None):
        dashboard.discard()
        close()

    async def do_save():
        try:
            saved = await dashboard.save()
        except ValidationError as exc:
            labels = ", ".join(FIELD_LABELS.get(m, m) for m in exc.missing)
            show_error(f"⚠  Required: {labels}")
            return
        except StorageError as exc:
            logger.exception("Save failed")
            show_error(f"Save failed: {exc}")
            return
        except EditorStateError as exc:
            show_error(str(exc))
            return
        if saved is not None:
            close()

    async def do_delete():
        try:
            deleted = await dashboard.delete()
        except (StorageError, NotFoundError) as exc:
            logger.exception("Delete failed")
            show_error(f"Delete failed: {exc}")
            return
        if deleted:
            close()

    actions = [ft.TextButton("Cancel", on_click=on_cancel)]
    if not creating:
        actions.insert(
            0,
            ft.TextButton(
                "Delete Issue",
                icon=ft.Icons.DELETE,
                style=ft.ButtonStyle(color=COLOR_DANGER),
                on_click=lambda _e: confirm(
                    "Delete issue",
                    "This issue will be permanently deleted. Continue?",
                    lambda: page.run_task(do_delete),
                ),
            ),
        )
    actions.append(
        ft.FilledButton(
            "Create" if creating else "Save",
            bgcolor=COLOR_PRIMARY,
            color="white",
            on_click=lambda _e: page.run_task(do_save),
        )
    )

    dialog = ft.AlertDialog(
        modal=True,
        title=build_title(),
        content=ft.Column(controls=[body, error_text], tight=True, spacing=8),
        actions=actions,
        actions_alignment=ft.MainAxisAlignment.END,
    )
    body.content = build_section()
    page.overlay.append(dialog)
    dialog.open = True
    page.update()
    return dialog
