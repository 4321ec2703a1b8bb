from typing import Any, Dict, Optional

from services.fetchers.downloader import download_url as run_download
from services.fetchers.types import FetchOptions

from .base import FETCH_OPTION_PROPERTIES, ToolDefinition, ToolResult, object_schema

download_url_tool = ToolDefinition(
    name="download_url",
    description="Download web page content from a specified URL to a file",
    inputSchema=object_schema(
        {
            "url": {
                "type": "string",
                "description": "URL to fetch. Make sure to include the schema (http:// or https:// "
                               "if not defined, preferring https for most cases)",
            },
            "filePath": {
                "type": "string",
                "description": "Path to the file where the content will be saved. "
                               "The directory will be created if it doesn't exist.",
            },
            **FETCH_OPTION_PROPERTIES,
        },
        required=["url", "filePath"],
    ),
)


async def download_url(args: Optional[Dict[str, Any]]) -> ToolResult:
    """Downloads a URL to disk (binary or extracted text)"""
    args = args or {}
    url = str(args.get("url") or "")
    file_path = str(args.get("filePath") or "")

    options = FetchOptions.from_args(args)
    summary = await run_download(url, file_path, options)
    return ToolResult.from_text(summary)
