import flet as ft
from issuedesk.config import (
    COLOR_CARD,
    COLOR_TEXT_MUTED,
    BORDER_RADIUS_CARD,
)
from issuedesk.ui.helpers import status_color, status_icon


class StatusTile(ft.Container):
    """Summary count for one status; clicking narrows the list to it."""

    def __init__(self, status: str, count: int, selected: bool, on_click_callback):
        super().__init__()
        self.status = status
        self.count = count
        self.selected = selected
        self.on_click_callback = on_click_callback

        accent = status_color(status)
        self.padding = ft.Padding.symmetric(horizontal=18, vertical=12)
        self.bgcolor = COLOR_CARD
        self.border_radius = BORDER_RADIUS_CARD
        self.border = ft.border.all(2 if selected else 1, accent if selected else "transparent")
        self.shadow = ft.BoxShadow(
            blur_radius=2,
            color=ft.Colors.BLACK12,
            offset=ft.Offset(0, 1),
        )
        self.ink = True
        self.expand = True
        self.on_click = self._handle_click
        self.content = ft.Row(
            controls=[
                ft.Icon(status_icon(status), color=accent, size=28),
                ft.Column(
                    controls=[
                        ft.Text(status, size=12, color=COLOR_TEXT_MUTED),
                        ft.Text(str(count), size=22, weight=ft.FontWeight.BOLD, color=accent),
                    ],
                    spacing=0,
                ),
            ],
            spacing=12,
        )

    def _handle_click(self, e):
        if self.on_click_callback:
            self.on_click_callback(self.status)
