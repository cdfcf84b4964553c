"""Client for the /config endpoint of a running uploader instance."""

from typing import Optional

import httpx
from pydantic import ValidationError

from ..core.logging import get_logger
from ..core.exceptions import ConfigFetchError
from .schemas import ClientConfig


logger = get_logger(__name__)


async def fetch_client_config(
    base_url: str,
    http_client: Optional[httpx.AsyncClient] = None,
    timeout: float = 10.0
) -> ClientConfig:
    """
    Fetch the OAuth client configuration from ``<base_url>/config``.

    Args:
        base_url: Root URL of the server, e.g. ``http://localhost:3000``
        http_client: Client to use instead of a short-lived one
        timeout: Request timeout in seconds for the short-lived client

    Returns:
        ClientConfig with whatever values the server published (may be None)

    Raises:
        ConfigFetchError: If the request fails, returns non-2xx or malformed data
    """
    url = f"{base_url.rstrip('/')}/config"
    owns_client = http_client is None
    client = http_client or httpx.AsyncClient(timeout=timeout)

    try:
        response = await client.get(url)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as e:
        raise ConfigFetchError(
            f"Config request failed with status {e.response.status_code}",
            url=url,
            status_code=e.response.status_code
        )
    except httpx.RequestError as e:
        raise ConfigFetchError(f"Config server unreachable: {e}", url=url)
    except ValueError as e:
        raise ConfigFetchError(f"Config response is not JSON: {e}", url=url)
    finally:
        if owns_client:
            await client.aclose()

    if not isinstance(payload, dict):
        raise ConfigFetchError("Config response is not a JSON object", url=url)

    try:
        config = ClientConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigFetchError(f"Config response is malformed: {e}", url=url)

    logger.debug(f"Fetched client config from {url}")
    return config
