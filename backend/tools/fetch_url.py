import logging
from typing import Any, Dict, Optional

from services.exceptions import ToolInputError
from services.fetchers.fetch_manager import fetch_single_url
from services.fetchers.types import FetchOptions

from .base import FETCH_OPTION_PROPERTIES, ToolDefinition, ToolResult, object_schema

logger = logging.getLogger(__name__)

fetch_url_tool = ToolDefinition(
    name="fetch_url",
    description="Retrieve web page content from a specified URL",
    inputSchema=object_schema(
        {
            "url": {
                "type": "string",
                "description": "URL to fetch. Make sure to include the schema (http:// or https:// "
                               "if not defined, preferring https for most cases)",
            },
            **FETCH_OPTION_PROPERTIES,
        },
        required=["url"],
    ),
)


async def fetch_url(args: Optional[Dict[str, Any]]) -> ToolResult:
    """Fetches one page and returns its processed content"""
    url = str((args or {}).get("url") or "")
    if not url:
        logger.error("[FetchURL] URL parameter missing")
        raise ToolInputError("URL parameter is required")

    options = FetchOptions.from_args(args)
    result = await fetch_single_url(url, options)
    return ToolResult.from_text(result.content)
