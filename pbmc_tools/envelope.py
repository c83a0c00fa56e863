"""
pbmc_tools/envelope.py
----------------------
The one result shape every tool returns: an MCP CallToolResult carrying
either structured data plus its JSON text mirror, or a single error message.
"""

import functools
import json
import logging

from mcp import types

from .errors import PbmcError

logger = logging.getLogger(__name__)


def success(data: dict) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=json.dumps(data, ensure_ascii=False))],
        structuredContent=data,
    )


def failure(message: str) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=message)],
        isError=True,
    )


def tool_result(func):
    """
    Wrap a tool operation that returns a dict or raises PbmcError.

    Whatever happens inside, the caller gets a CallToolResult: nothing
    accumulated before a failure leaks into the error result.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        params = ", ".join(f"{k}={v!r}" for k, v in kwargs.items() if k != "fetch")
        logger.info("%s called with: %s", func.__name__, params)
        try:
            data = func(*args, **kwargs)
        except PbmcError as e:
            logger.warning("%s failed: %s", func.__name__, e)
            return failure(str(e))
        return success(data)

    return wrapper
