import flet as ft
from issuedesk.config import (
    COLOR_CARD,
    COLOR_TEXT_MUTED,
    COLOR_TEXT_MAIN,
    BORDER_RADIUS_CARD,
)
from issuedesk.domain.models import Issue
from issuedesk.domain.reference import ReferenceData
from issuedesk.ui.helpers import risk_color, status_color, status_icon
from issuedesk.utils.time import format_datetime


class IssueListCard(ft.Container):
    def __init__(
        self,
        issue: Issue,
        reference: ReferenceData,
        on_click_callback,
    ):
        super().__init__()
        self.issue = issue
        self.reference = reference
        self.on_click_callback = on_click_callback

        self.padding = ft.Padding.all(14)
        self.bgcolor = COLOR_CARD
        self.border_radius = BORDER_RADIUS_CARD
        self.border = ft.border.all(1, "transparent")
        self.shadow = ft.BoxShadow(
            blur_radius=2,
            color=ft.Colors.BLACK12,
            offset=ft.Offset(0, 1),
        )
        self.on_click = self._handle_click
        self.ink = True
        self.margin = ft.margin.only(bottom=8)

        self.content = self._build_content()

    def _handle_click(self, e):
        if self.on_click_callback:
            self.on_click_callback(self.issue.id)

    def _build_content(self):
        issue = self.issue
        accent_color = status_color(issue.status)
        assignee = issue.assignee.display_name if issue.assignee else "Unassigned"
        project = issue.project.display_name if issue.project else "-"
        stage = issue.stage.display_name if issue.stage else "-"

        meta_row = [
            ft.Text(f"#{issue.id[:8]}", size=12, color=COLOR_TEXT_MUTED),
            ft.Text(project, size=12, color=COLOR_TEXT_MUTED),
            ft.Text(f"・  {issue.environment or '-'}", size=12, color=COLOR_TEXT_MUTED),
            ft.Text(f"・  Stage: {stage}", size=12, color=COLOR_TEXT_MUTED),
            ft.Text(f"・  Assignee: {assignee}", size=12, color=COLOR_TEXT_MUTED),
            ft.Text(
                f"・  Reported {format_datetime(issue.reported_at)}",
                size=12,
                color=COLOR_TEXT_MUTED,
            ),
        ]
        risk_names = [self.reference.name_of("risks", r) for r in issue.risks]

        return ft.Row(
            controls=[
                ft.Icon(status_icon(issue.status), size=24, color=accent_color),
                ft.Column(
                    controls=[
                        ft.Text(
                            issue.title,
                            weight=ft.FontWeight.BOLD,
                            size=15,
                            color=COLOR_TEXT_MAIN,
                            max_lines=1,
                            overflow=ft.TextOverflow.ELLIPSIS,
                        ),
                        ft.Row(controls=meta_row, spacing=8, wrap=True),
                        *(
                            [ft.Text(", ".join(risk_names), size=11, color=COLOR_TEXT_MUTED)]
                            if risk_names
                            else []
                        ),
                    ],
                    spacing=4,
                    expand=True,
                ),
                ft.Text(
                    f"Risk {issue.risk_score}",
                    size=12,
                    weight=ft.FontWeight.W_600,
                    color=risk_color(issue.risk_score),
                ),
                ft.Container(
                    content=ft.Text(
                        issue.status,
                        size=11,
                        color="white",
                        weight=ft.FontWeight.BOLD,
                    ),
                    bgcolor=accent_color,
                    border_radius=12,
                    padding=ft.Padding.symmetric(horizontal=10, vertical=2),
                ),
            ],
            spacing=16,
            alignment=ft.MainAxisAlignment.START,
            vertical_alignment=ft.CrossAxisAlignment.START,
        )
