"""
Main application entry point for DriveUploader.

This module provides the CLI commands for serving the uploader page,
inspecting the published client configuration and uploading a file
without the browser UI.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from src.core.exceptions import ConfigFetchError, ConfigurationError, FileReadError
from src.core.logging import setup_logging, get_logger
from src.drive_integration import fetch_client_config, init_drive_client, reset_drive_client
from src.gui.config_api import config_payload, load_client_config
from src.settings import AppSettings, get_settings
from src.uploader import Notice, NoticeLevel, UploadWorkflow, selected_file_from_path


logger = get_logger(__name__)


NOTICE_COLORS = {
    NoticeLevel.POSITIVE: 'green',
    NoticeLevel.NEGATIVE: 'red',
    NoticeLevel.WARNING: 'yellow',
    NoticeLevel.INFO: None,
}


def echo_notice(notice: Notice) -> None:
    """Print a notice the way the page would show it."""
    click.secho(notice.message, fg=NOTICE_COLORS[notice.level],
                err=notice.level == NoticeLevel.NEGATIVE)


@click.group()
@click.version_option(version=get_settings().version)
@click.option('--debug', '-d', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """DriveUploader - upload a file to Google Drive and get a share link."""
    settings = get_settings()
    if debug:
        settings.debug = True
        settings.logging.level = "DEBUG"
    setup_logging(settings.logging, "drive_uploader")
    ctx.obj = settings


@cli.command()
@click.option('--host', help='Interface to bind (default from SERVER_HOST)')
@click.option('--port', '-p', type=int, help='Port to listen on (default from PORT)')
@click.option('--show/--no-show', default=None, help='Open a browser tab on start')
@click.pass_obj
def serve(settings: AppSettings, host: Optional[str], port: Optional[int], show: Optional[bool]):
    """Serve the uploader page, /config and static files."""
    from src.gui.app import main as run_gui

    if host:
        settings.server.host = host
    if port:
        settings.server.port = port
    if show is not None:
        settings.server.show = show

    run_gui(settings)


@cli.command()
@click.pass_obj
def config(settings: AppSettings):
    """Print the client configuration served at /config."""
    click.echo(json.dumps(config_payload(settings.google), indent=2))


@cli.command()
@click.argument('path', type=click.Path(path_type=Path))
@click.option('--mime-type', '-t', help='Content type to declare (guessed from the name by default)')
@click.option('--server', '-s', help='Fetch client configuration from a running instance, e.g. http://localhost:3000')
@click.pass_obj
def upload(settings: AppSettings, path: Path, mime_type: Optional[str], server: Optional[str]):
    """Upload PATH to the uploads folder and print its share link."""
    success = asyncio.run(run_upload(settings, path, mime_type, server))
    if not success:
        sys.exit(1)


async def run_upload(
    settings: AppSettings,
    path: Path,
    mime_type: Optional[str] = None,
    server: Optional[str] = None
) -> bool:
    """Run the upload workflow for a local file; True on success."""
    try:
        if server:
            client_config = await fetch_client_config(server)
        else:
            client_config = load_client_config(settings.google)
    except ConfigFetchError as e:
        logger.error(f"Error fetching config: {e.message}")
        echo_notice(Notice(message="Error initializing application", level=NoticeLevel.NEGATIVE))
        return False

    try:
        init_drive_client(client_config, settings)
    except ConfigurationError as e:
        logger.error(f"Error initializing Google API client: {e.message}")
        echo_notice(Notice(message="Error initializing Google API client", level=NoticeLevel.NEGATIVE))
        return False

    try:
        try:
            selected = selected_file_from_path(path, mime_type)
        except FileReadError as e:
            echo_notice(Notice(message=e.message, level=NoticeLevel.NEGATIVE))
            return False

        workflow = UploadWorkflow(settings=settings.upload, notify=echo_notice)
        outcome = await workflow.upload(selected)

        if outcome.success:
            click.echo(outcome.web_view_link)

        return outcome.success
    finally:
        reset_drive_client()


if __name__ == '__main__':
    cli()
