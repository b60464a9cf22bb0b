import flet as ft
from issuedesk.config import (
    COLOR_PRIMARY,
    BORDER_RADIUS_BTN,
)


class CommentForm(ft.Container):
    def __init__(self, user: str, on_submit, disabled: bool = False):
        super().__init__()
        self.user = user
        self.on_submit = on_submit
        self.disabled = disabled

        self.comment_input = ft.TextField(
            hint_text="Add a comment...",
            multiline=True,
            min_lines=2,
            max_lines=5,
            border_color="transparent",
            bgcolor="white",
            border_radius=BORDER_RADIUS_BTN,
            disabled=self.disabled,
            expand=True,
            content_padding=ft.Padding.all(12),
        )

        self.content = self._build_content()

    def _build_content(self):
        return ft.Row(
            controls=[
                ft.CircleAvatar(
                    content=ft.Text((self.user or "?")[:1].upper()),
                    radius=16,
                    bgcolor=COLOR_PRIMARY,
                    color="white",
                ),
                self.comment_input,
                ft.IconButton(
                    icon=ft.Icons.SEND,
                    icon_color=COLOR_PRIMARY,
                    tooltip="Post comment",
                    on_click=self._on_submit,
                    disabled=self.disabled,
                ),
            ],
            vertical_alignment=ft.CrossAxisAlignment.START,
        )

    def _on_submit(self, e):
        body = (self.comment_input.value or "").strip()
        if not body:
            return

        self.on_submit(body)

        self.comment_input.value = ""
        self.comment_input.update()
