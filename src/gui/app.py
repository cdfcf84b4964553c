"""
Main GUI application for DriveUploader using NiceGUI framework.
"""

import json
from typing import Any, Callable, Optional

from nicegui import app, events, ui

from ..core.exceptions import ConfigFetchError, ConfigurationError, DriveIntegrationError
from ..core.logging import get_logger, setup_logging
from ..drive_integration.client import get_drive_client, init_drive_client
from ..settings import AppSettings, get_settings
from ..uploader import (
    Notice, SelectedFile, UploadWorkflow, WorkflowState,
    copy_link, selected_file_from_bytes
)
from .config_api import load_client_config, register_routes


logger = get_logger(__name__)


CLIPBOARD_SCRIPT = (
    "return navigator.clipboard "
    "? navigator.clipboard.writeText({text}).then(() => true, () => false) "
    ": false"
)


async def write_browser_clipboard(text: str, run_javascript: Callable[..., Any] = ui.run_javascript) -> bool:
    """Write ``text`` with the browser Clipboard API; False when the browser refuses."""
    result = await run_javascript(CLIPBOARD_SCRIPT.format(text=json.dumps(text)))
    return result is True


def ensure_drive_client(settings: AppSettings) -> Optional[str]:
    """
    Make sure the process-wide Drive client exists.

    Returns:
        None when the client is ready, otherwise the notice to show
    """
    try:
        get_drive_client()
        return None
    except DriveIntegrationError:
        pass

    try:
        client_config = load_client_config(settings.google)
    except ConfigFetchError as e:
        logger.error(f"Error fetching config: {e.message}")
        return "Error initializing application"

    try:
        init_drive_client(client_config, settings)
    except ConfigurationError as e:
        logger.error(f"Error initializing Google API client: {e.message}")
        return "Error initializing Google API client"

    return None


class UploaderPage:
    """Single-page uploader: pick a file, upload it, copy the link."""

    def __init__(self, settings: AppSettings):
        self.settings = settings
        self.selected_file: Optional[SelectedFile] = None
        self.workflow = UploadWorkflow(settings=settings.upload, notify=self.show_notice)
        self.workflow.add_listener(self.on_state_change)
        self.setup_ui()

        init_error = ensure_drive_client(settings)
        if init_error:
            ui.notify(init_error, type='negative')

    def setup_ui(self):
        """Setup the page layout."""
        ui.colors(primary='#1976d2', secondary='#424242', accent='#82b1ff', dark='#121212')

        with ui.column().classes('w-full max-w-xl mx-auto p-6 gap-4'):
            ui.label(self.settings.server.title).classes('text-3xl font-bold')

            ui.upload(
                label='Choose a file',
                auto_upload=True,
                max_files=1,
                on_upload=self.handle_file_change
            ).classes('w-full')
            self.file_label = ui.label('No file selected').classes('text-sm text-gray-600')

            with ui.row().classes('items-center gap-4'):
                self.upload_button = ui.button(
                    'Upload to Google Drive',
                    on_click=self.upload_file,
                    icon='cloud_upload'
                ).props('color=primary')
                self.spinner = ui.spinner(size='lg')
                self.spinner.visible = False

            self.result_area = ui.column().classes('w-full mt-4')
            with self.result_area:
                ui.label('File URL:').classes('text-subtitle1')
                self.url_input = ui.input(value='').props('readonly outlined').classes('w-full')
                with self.url_input.add_slot('append'):
                    ui.button(icon='content_copy', on_click=self.copy_to_clipboard).props('flat round dense')
            self.result_area.visible = False

    def handle_file_change(self, e: events.UploadEventArguments):
        """Keep the file the browser just sent; a new pick replaces it."""
        content = e.content.read()
        self.selected_file = selected_file_from_bytes(e.name, content, e.type)
        self.file_label.text = f'{self.selected_file.name} ({self.selected_file.size} bytes)'
        e.sender.reset()
        logger.debug(f"Selected {self.selected_file!r}")

    async def upload_file(self):
        """Run the upload workflow for the selected file."""
        outcome = await self.workflow.upload(self.selected_file)
        if outcome.success and outcome.web_view_link:
            self.url_input.value = outcome.web_view_link
            self.result_area.visible = True

    def on_state_change(self, state: WorkflowState):
        """Drive the busy indicator from the workflow state."""
        self.spinner.visible = state.is_busy
        if state.is_busy:
            self.upload_button.disable()
        else:
            self.upload_button.enable()

    async def copy_to_clipboard(self):
        await copy_link(self.workflow.web_view_link, write_browser_clipboard, self.show_notice)

    def show_notice(self, notice: Notice):
        ui.notify(notice.message, type=notice.level.value)


def create_app(settings: AppSettings) -> None:
    """Register the /config route, static files and the uploader page."""
    register_routes(app, settings)

    @ui.page('/')
    def index():
        UploaderPage(settings)

    # Any other path renders the same page
    @ui.page('/{path:path}')
    def catch_all(path: str):
        UploaderPage(settings)


def main(settings: Optional[AppSettings] = None):
    """Main function to run the web application."""
    settings = settings or get_settings()
    setup_logging(settings.logging)

    create_app(settings)

    try:
        logger.info(f"Server running on port {settings.server.port}")
        ui.run(
            title=settings.server.title,
            host=settings.server.host,
            port=settings.server.port,
            show=settings.server.show,
            reload=False,
            favicon='☁️'
        )
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down")
    finally:
        logger.info("GUI application closed")


if __name__ in {"__main__", "__mp_main__"}:
    main()
