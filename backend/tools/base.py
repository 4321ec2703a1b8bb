"""
Tool-Definitionen und Ergebnis-Modelle, gemeinsam für MCP und HTTP
"""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    content: List[TextContent]

    @classmethod
    def from_text(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])


class ToolDefinition(BaseModel):
    name: str
    description: str
    inputSchema: Dict[str, Any]


# Gemeinsame Optionen aller Fetch-Tools (camelCase wie im Tool-Protokoll)
FETCH_OPTION_PROPERTIES: Dict[str, Dict[str, Any]] = {
    "timeout": {
        "type": "number",
        "description": "Page loading timeout in milliseconds, default is 30000 (30 seconds)",
    },
    "waitUntil": {
        "type": "string",
        "enum": ["load", "domcontentloaded", "networkidle", "commit"],
        "description": "Specifies when navigation is considered complete, options: 'load', "
                       "'domcontentloaded', 'networkidle', 'commit', default is 'load'",
    },
    "extractContent": {
        "type": "boolean",
        "description": "Whether to intelligently extract the main content, default is true",
    },
    "maxLength": {
        "type": "number",
        "description": "Maximum length of returned content (in characters), default is no limit",
    },
    "returnHtml": {
        "type": "boolean",
        "description": "Whether to return HTML content instead of Markdown, default is false",
    },
    "waitForNavigation": {
        "type": "boolean",
        "description": "Whether to wait for additional navigation after initial page load "
                       "(useful for sites with anti-bot verification), default is false",
    },
    "navigationTimeout": {
        "type": "number",
        "description": "Maximum time to wait for additional navigation in milliseconds, "
                       "default is 10000 (10 seconds)",
    },
    "disableMedia": {
        "type": "boolean",
        "description": "Whether to disable media resources (images, stylesheets, fonts, media), default is true",
    },
    "debug": {
        "type": "boolean",
        "description": "Whether to enable debug mode (showing browser window), "
                       "overrides the --debug command line flag if specified",
    },
}


def object_schema(properties: Dict[str, Dict[str, Any]], required: List[str]) -> Dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}
