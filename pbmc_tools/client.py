"""
pbmc_tools/client.py
--------------------
The HTTP side: the default fetch capability and the sequential request loop.

Tool operations accept any `fetch(url) -> payload` callable, so everything
above this module can be exercised without a network.
"""

import logging
from typing import Callable, Iterable, Iterator

import requests

import config

from .errors import TransportError, UpstreamStatusError
from .query import RequestDescriptor

logger = logging.getLogger(__name__)

Fetch = Callable[[str], object]


def fetch_json(url: str, timeout: float | None = None):
    """GET `url` and return the decoded JSON body, or raise a PbmcError."""
    logger.debug("GET %s", url)
    try:
        resp = requests.get(url, timeout=timeout or config.PBMC_TIMEOUT)
    except requests.RequestException as e:
        raise TransportError(f"Network or server error: {e}") from e

    if not 200 <= resp.status_code < 300:
        raise UpstreamStatusError(resp.status_code)

    try:
        return resp.json()
    except ValueError as e:
        raise TransportError("Network or response format error: body is not JSON") from e


def fetch_all(
    descriptors: Iterable[RequestDescriptor],
    fetch: Fetch,
) -> Iterator[tuple[RequestDescriptor, object]]:
    """
    Issue requests one at a time, in order, yielding (descriptor, payload).
    The first failure propagates and nothing after it is requested.
    """
    for descriptor in descriptors:
        yield descriptor, fetch(descriptor.url)
