import logging
from typing import Any, Dict, Optional

from services.exceptions import ToolInputError
from services.fetchers.fetch_manager import combine_results, fetch_multiple_urls
from services.fetchers.types import FetchOptions

from .base import FETCH_OPTION_PROPERTIES, ToolDefinition, ToolResult, object_schema

logger = logging.getLogger(__name__)

fetch_urls_tool = ToolDefinition(
    name="fetch_urls",
    description="Retrieve web page content from multiple specified URLs",
    inputSchema=object_schema(
        {
            "urls": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Array of URLs to fetch",
            },
            **FETCH_OPTION_PROPERTIES,
        },
        required=["urls"],
    ),
)


async def fetch_urls(args: Optional[Dict[str, Any]]) -> ToolResult:
    """Fetches all URLs in one browser and returns the framed, combined content"""
    urls = (args or {}).get("urls")
    if not urls or not isinstance(urls, list):
        logger.error("[FetchURLs] URLs parameter missing or not an array")
        raise ToolInputError("URLs parameter is required and must be an array")

    options = FetchOptions.from_args(args)
    results = await fetch_multiple_urls(urls, options)
    return ToolResult.from_text(combine_results(results))
