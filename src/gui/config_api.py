"""
HTTP routes served next to the uploader page.

``GET /config`` publishes the OAuth client ID and API key exactly as they
are found in the environment, and the public directory is mounted under
``/static``. The page routes themselves live in ``app.py``.
"""

from typing import Dict, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError

from ..core.exceptions import ConfigFetchError
from ..core.logging import get_logger
from ..drive_integration.schemas import ClientConfig
from ..settings import AppSettings, GoogleSettings


logger = get_logger(__name__)


def config_payload(settings: GoogleSettings) -> Dict[str, Optional[str]]:
    """Client configuration as served by /config; missing values stay None."""
    return {
        "GOOGLE_CLIENT_ID": settings.client_id,
        "GOOGLE_API_KEY": settings.api_key,
    }


def load_client_config(settings: GoogleSettings) -> ClientConfig:
    """
    Read the same configuration the page would get from /config.

    Raises:
        ConfigFetchError: If the payload does not describe a client config
    """
    try:
        return ClientConfig.model_validate(config_payload(settings))
    except ValidationError as e:
        raise ConfigFetchError(f"Client configuration is malformed: {e}")


def register_routes(app: FastAPI, settings: AppSettings) -> None:
    """
    Register /config and the static mount on ``app``.

    Must run before the catch-all page is registered so that these
    routes match first.
    """

    @app.get("/config")
    def get_config() -> JSONResponse:
        return JSONResponse(config_payload(settings.google))

    public_dir = settings.server.public_dir
    if public_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(public_dir)), name="static")
        logger.info(f"Serving static files from {public_dir}")
    else:
        logger.debug(f"No public directory at {public_dir}, static files disabled")
