"""
app_main.py - Issue Desk main application
Issue Desk v1.0
"""

import logging

import flet as ft

from issuedesk.config import APP_TITLE, BACKEND, COLOR_BG, COLOR_DANGER, COLOR_PRIMARY
from issuedesk.dashboard import RemoteDashboard, create_dashboard
from issuedesk.domain.errors import EditorStateError, IssueDeskError, NotFoundError
from issuedesk.ui import editor, views
from issuedesk.ui.helpers import current_user
from issuedesk.utils.exports import save_export

logger = logging.getLogger(__name__)


def main(page: ft.Page):
    page.title = APP_TITLE
    page.window.maximized = True
    page.theme_mode = ft.ThemeMode.LIGHT
    page.bgcolor = COLOR_BG
    page.padding = 0
    page.theme = ft.Theme(color_scheme_seed=COLOR_PRIMARY)

    user = current_user()
    dashboard = create_dashboard(user)
    filters_open = False
    logger.info("Starting %s with %s backend as %s", APP_TITLE, BACKEND, user)

    def show_error(title: str, exc: Exception):
        page.overlay.append(
            ft.AlertDialog(
                title=ft.Text(title),
                content=ft.Text(f"Details: {exc}"),
                open=True,
            )
        )
        page.update()

    def notify(message: str, error: bool = False):
        page.snack_bar = ft.SnackBar(ft.Text(message), bgcolor=COLOR_DANGER if error else None)
        page.snack_bar.open = True
        page.update()

    def dispatch(coro_fn, *args):
        async def runner():
            try:
                await coro_fn(*args)
            except IssueDeskError as exc:
                logger.exception("Dashboard action failed")
                notify(str(exc), error=True)
            render()

        page.run_task(runner)

    def toggle_filters():
        nonlocal filters_open
        filters_open = not filters_open
        render()

    def open_issue(issue_id: str):
        try:
            dashboard.open_view(issue_id)
        except (EditorStateError, NotFoundError) as exc:
            notify(str(exc), error=True)
            return
        editor.show_issue_dialog(page, dashboard, on_closed=render)

    def new_issue():
        try:
            dashboard.open_create()
        except EditorStateError as exc:
            notify(str(exc), error=True)
            return
        editor.show_issue_dialog(page, dashboard, on_closed=render)

    def export():
        content = dashboard.export_csv()
        if content is None:
            notify("No data to export")
            return
        try:
            path = save_export(content)
        except OSError as exc:
            logger.exception("Export failed")
            show_error("Export failed", exc)
            return
        notify(f"Exported to {path}")

    def render():
        try:
            page.views.clear()
            page.views.append(
                views.build_dashboard_view(
                    page=page,
                    dashboard=dashboard,
                    user=user,
                    filters_open=filters_open,
                    dispatch=dispatch,
                    on_rerender=render,
                    on_toggle_filters=toggle_filters,
                    on_new_issue=new_issue,
                    on_select_issue=open_issue,
                    on_export=export,
                )
            )
            page.update()
        except Exception as exc:
            logger.exception("Error in render")
            show_error("An error occurred", exc)

    async def on_window_event(e: ft.WindowEvent):
        if e.type == ft.WindowEventType.CLOSE:
            if isinstance(dashboard, RemoteDashboard):
                try:
                    await dashboard.close()
                except Exception:
                    logger.warning("Failed to close API client", exc_info=True)
            page.window.prevent_close = False
            await page.window.close()

    page.window.prevent_close = True
    page.window.on_event = on_window_event

    async def startup():
        try:
            await dashboard.load()
        except IssueDeskError as exc:
            logger.exception("Failed to load issues")
            show_error("Failed to load issues", exc)
        render()

    render()
    page.run_task(startup)


if __name__ == "__main__":
    ft.app(main)
