import logging
from typing import Any, Dict, Optional

from services.browser_installer import install_browser
from services.exceptions import InstallationError

from .base import ToolDefinition, ToolResult, object_schema

logger = logging.getLogger(__name__)

browser_install_tool = ToolDefinition(
    name="browser_install",
    description="Install Playwright Chromium browser binary. "
                "Call this if you get an error about the browser not being installed.",
    inputSchema=object_schema(
        {
            "withDeps": {
                "type": "boolean",
                "description": "Install system dependencies required by Chromium browser. Default is false",
                "default": False,
            },
            "force": {
                "type": "boolean",
                "description": "Force installation even if Chromium is already installed. Default is false",
                "default": False,
            },
        },
        required=[],
    ),
)


async def browser_install(args: Optional[Dict[str, Any]]) -> ToolResult:
    """
    Installs Chromium. Never raises: failures come back as a ❌ text payload
    so the tool-call layer never sees an exception from this tool.
    """
    args = args or {}
    with_deps = args.get("withDeps") is True
    force = args.get("force") is True

    logger.info("[BrowserInstall] Starting installation of Chromium browser...")

    try:
        result = await install_browser(with_deps=with_deps, force=force)
    except InstallationError as e:
        message = f"Failed to install Chromium browser: {e}"
        logger.error(f"[BrowserInstall] {message}")
        return ToolResult.from_text(
            f"❌ {message}\n\nOutput:\n{e.stdout}\n\nError:\n{e.stderr}"
        )
    except Exception as e:
        message = f"Chromium installation failed: {e}"
        logger.error(f"[BrowserInstall] {message}")
        return ToolResult.from_text(
            f"❌ {message}\n\nPlease check your internet connection and try again. "
            "You may also need to run with elevated privileges."
        )

    success_message = "Successfully installed Chromium browser" + (
        " with system dependencies" if with_deps else ""
    )
    logger.info(f"[BrowserInstall] {success_message}")
    return ToolResult.from_text(f"✅ {success_message}\n\n{result.stdout}")
