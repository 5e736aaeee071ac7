"""
Liveness probe for the Meme Generator API.

Calls the health endpoint once and exits 0 on any 2xx response, 1 otherwise
(including when the server cannot be reached). Suitable for container
HEALTHCHECK instructions.
"""

import logging
import sys
from typing import Optional

import httpx

from meme_captioner.config import get_settings

logger = logging.getLogger(__name__)


def probe(
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> int:
    """
    Check the health endpoint.

    Args:
        url: Health endpoint URL. Defaults to HEALTHCHECK_URL.
        timeout: Request timeout in seconds. Defaults to HEALTHCHECK_TIMEOUT.
        transport: Optional httpx transport, used by tests.

    Returns:
        0 if the endpoint answered with a 2xx status, 1 otherwise
    """
    settings = get_settings()
    url = url or settings.HEALTHCHECK_URL
    timeout = timeout if timeout is not None else settings.HEALTHCHECK_TIMEOUT

    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.get(url)
    except httpx.HTTPError as e:
        logger.error(f"Health check failed for {url}: {e}")
        return 1

    if response.is_success:
        return 0

    logger.error(f"Health check returned status {response.status_code} for {url}")
    return 1


def main() -> None:
    """Console entry point."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    sys.exit(probe(sys.argv[1] if len(sys.argv) > 1 else None))


if __name__ == "__main__":
    main()
