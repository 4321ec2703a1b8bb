import argparse
import asyncio
import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from playwright.async_api import Error as PlaywrightError

import config
from services.browser_installer import ensure_browser_installed
from services.exceptions import (
    FetcherError,
    NavigationError,
    ToolInputError,
    UnknownToolError,
    URLSecurityError,
)
from tools import ToolDefinition, ToolResult, call_tool, tools

logger = logging.getLogger(__name__)


# CORS-Konfiguration aus Environment-Variable mit Security-Validierung
def _get_cors_origins() -> List[str]:
    """
    Wildcard (*) wird blockiert: sonst könnte jede Website Tool-Aufrufe
    (inkl. Datei-Downloads) auslösen.
    """
    origins_str = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    origins = [origin.strip() for origin in origins_str.split(",") if origin.strip()]

    if "*" in origins:
        logger.warning("⚠️  CORS Wildcard (*) detected in CORS_ORIGINS - falling back to localhost only")
        return ["http://localhost:3000"]

    valid_origins = [o for o in origins if o.startswith("http://") or o.startswith("https://")]
    for origin in set(origins) - set(valid_origins):
        logger.warning(f"⚠️  Invalid CORS origin (must start with http:// or https://): {origin}")

    return valid_origins or ["http://localhost:3000"]


app = FastAPI(title="Simple FetchTool Backend", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# FetcherError-Subklasse -> HTTP-Status
ERROR_STATUS = [
    (UnknownToolError, 404),
    (URLSecurityError, 400),
    (ToolInputError, 400),
    (NavigationError, 502),
]


def _http_error(error: FetcherError) -> HTTPException:
    status_code = next((status for cls, status in ERROR_STATUS if isinstance(error, cls)), 500)
    return HTTPException(
        status_code=status_code,
        detail={"error": {"code": error.code, "message": str(error)}},
    )


@app.get("/health/ready")
async def health_ready():
    return {"status": "ready", "timestamp": datetime.now().isoformat()}


@app.get("/health/live")
async def health_live():
    return {"status": "alive", "timestamp": datetime.now().isoformat()}


@app.get("/tools", response_model=List[ToolDefinition])
async def list_tools_endpoint():
    return tools


@app.post("/tools/{name}", response_model=ToolResult)
async def call_tool_endpoint(name: str, arguments: Optional[Dict[str, Any]] = Body(default=None)):
    """
    Ruft ein Tool mit den JSON-Body-Argumenten auf.

    Fehler kommen als {"error": {"code", "message"}} mit passendem Status zurück.
    """
    try:
        return await call_tool(name, arguments)
    except FetcherError as e:
        logger.warning(f"Tool {name} failed: {e}")
        raise _http_error(e)
    except PlaywrightError as e:
        # Browser-Fehler außerhalb der Navigation (z.B. Launch)
        logger.warning(f"Tool {name} failed in browser: {e}")
        raise _http_error(NavigationError(str(e)))


@app.on_event("startup")
async def startup_event():
    """Prüft beim Start, ob Chromium installiert ist (abschaltbar)"""
    if not config.ENSURE_BROWSER_ON_STARTUP:
        return
    try:
        await ensure_browser_installed()
    except FetcherError as e:
        # Server läuft weiter; browser_install kann später nachinstallieren
        logger.error(f"❌ Browser setup failed: {e}")


async def _run_stdio(check_browser: bool) -> None:
    from mcp_server import run_stdio_server

    if check_browser:
        try:
            await ensure_browser_installed()
        except FetcherError as e:
            logger.error(f"❌ Browser setup failed: {e}")
    await run_stdio_server()


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Headless-browser fetch tools over MCP (stdio) or HTTP")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default=config.TRANSPORT if config.TRANSPORT in ("stdio", "http") else "stdio",
        help="Transport to serve the tools on (default: stdio)",
    )
    parser.add_argument("--host", default=config.HOST, help=f"HTTP host (default: {config.HOST})")
    parser.add_argument("--port", type=int, default=config.PORT, help=f"HTTP port (default: {config.PORT})")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show the browser window and keep it open after each call",
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Logging level (default: INFO)")
    parser.add_argument(
        "--skip-browser-check",
        action="store_true",
        help="Do not check/install Chromium on startup",
    )

    args = parser.parse_args(argv)

    config.configure_logging(args.log_level)
    if args.debug:
        config.set_debug_mode(True)
        logger.info("Debug mode enabled: browser windows stay open")
    if args.skip_browser_check:
        config.ENSURE_BROWSER_ON_STARTUP = False

    if args.transport == "http":
        import uvicorn

        uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())
    else:
        asyncio.run(_run_stdio(config.ENSURE_BROWSER_ON_STARTUP))


if __name__ == "__main__":
    main()
