"""
Browser Installer - Chromium-Erkennung und Installation über die Playwright-CLI
"""

import asyncio
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List

from playwright.async_api import async_playwright

from .exceptions import InstallationError, VerificationError

logger = logging.getLogger(__name__)

LAUNCH_CHECK_TIMEOUT_MS = 5000
MANUAL_INSTALL_HINT = "python -m playwright install chromium"


@dataclass(frozen=True)
class InstallCommand:
    """One way of invoking the Playwright installer"""
    description: str
    argv: List[str]


@dataclass
class InstallResult:
    success: bool
    exit_code: int
    stdout: str
    stderr: str
    command: str


async def _can_launch_browser(chromium) -> bool:
    try:
        browser = await chromium.launch(headless=True, timeout=LAUNCH_CHECK_TIMEOUT_MS)
        await browser.close()
        logger.debug("[Browser Check] Chromium browser successfully launched and closed")
        return True
    except Exception as e:
        logger.debug(f"[Browser Check] Failed to launch Chromium: {e}")
        return False


def _executable_exists(chromium) -> bool:
    try:
        executable_path = chromium.executable_path
    except Exception as e:
        logger.debug(f"[Browser Check] Could not get executable path: {e}")
        return False

    if executable_path and os.path.exists(executable_path):
        logger.debug(f"[Browser Check] Chromium executable found at: {executable_path}")
        return True
    return False


async def check_browser_installation() -> bool:
    """
    Prüft, ob Chromium verfügbar ist.

    1. Headless starten (5s Timeout) und sofort schließen
    2. Fallback: existiert die bekannte Executable auf der Platte?
    """
    async with async_playwright() as playwright:
        if await _can_launch_browser(playwright.chromium):
            return True
        return _executable_exists(playwright.chromium)


def installer_commands(with_deps: bool = False, force: bool = False) -> List[InstallCommand]:
    """
    Candidate installer invocations, in order of preference.

    The ``playwright`` console script next to the running interpreter belongs
    to the same environment as the imported library, so its browser revision
    matches. ``python -m playwright`` is the fallback.
    """
    install_args = ["install"]
    if with_deps:
        install_args.append("--with-deps")
    if force:
        install_args.append("--force")
    install_args.append("chromium")

    commands: List[InstallCommand] = []
    script_name = "playwright.exe" if os.name == "nt" else "playwright"
    local_cli = Path(sys.executable).parent / script_name
    if local_cli.exists():
        commands.append(InstallCommand("local playwright CLI", [str(local_cli), *install_args]))
    commands.append(InstallCommand("python -m playwright", [sys.executable, "-m", "playwright", *install_args]))
    return commands


async def _pump(stream: asyncio.StreamReader, label: str, chunks: List[str]) -> None:
    # Live auf stderr: stdout gehört dem MCP-Transport
    while True:
        line = await stream.readline()
        if not line:
            break
        text = line.decode(errors="replace")
        chunks.append(text)
        sys.stderr.write(text)
        sys.stderr.flush()
        logger.debug(f"[BrowserInstall] {label}: {text.rstrip()}")


async def run_install_command(command: InstallCommand) -> InstallResult:
    """
    Runs one installer command, streaming its output live.

    Raises:
        OSError: If the process cannot be spawned at all
    """
    logger.info(f"[BrowserInstall] Executing ({command.description}): {' '.join(command.argv)}")
    process = await asyncio.create_subprocess_exec(
        *command.argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    stdout_chunks: List[str] = []
    stderr_chunks: List[str] = []
    await asyncio.gather(
        _pump(process.stdout, "stdout", stdout_chunks),
        _pump(process.stderr, "stderr", stderr_chunks),
    )
    exit_code = await process.wait()
    logger.debug(f"[BrowserInstall] Process exited with code: {exit_code}")

    return InstallResult(
        success=exit_code == 0,
        exit_code=exit_code,
        stdout="".join(stdout_chunks),
        stderr="".join(stderr_chunks),
        command=" ".join(command.argv),
    )


async def install_browser(with_deps: bool = False, force: bool = False) -> InstallResult:
    """
    Installiert Chromium über die erste startbare Installer-Variante.

    Raises:
        InstallationError: Installer exited non-zero, or no candidate could
            be started
    """
    logger.info("[Browser Install] Installing Chromium browser...")
    logger.info("[Browser Install] This may take a few minutes on first run.")

    spawn_errors: List[str] = []
    for command in installer_commands(with_deps=with_deps, force=force):
        try:
            result = await run_install_command(command)
        except OSError as e:
            logger.warning(f"[Browser Install] Could not start {command.description}: {e}")
            spawn_errors.append(f"{command.description}: {e}")
            continue

        if result.success:
            logger.info("[Browser Install] Chromium installation completed successfully!")
            return result

        logger.error(f"[Browser Install] Installation failed with exit code: {result.exit_code}")
        if result.stderr:
            logger.error(f"[Browser Install] Error details: {result.stderr}")
        raise InstallationError(
            f"Browser installation failed with exit code: {result.exit_code}",
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    raise InstallationError(
        "Failed to start installation process: " + "; ".join(spawn_errors),
        stderr="\n".join(spawn_errors),
    )


async def ensure_browser_installed() -> None:
    """
    Check -> install -> re-check.

    Raises:
        InstallationError: Installer failed
        VerificationError: Installer succeeded but Chromium is still unusable
    """
    logger.info("[Browser Setup] Checking Chromium browser installation...")

    try:
        if await check_browser_installation():
            logger.info("[Browser Setup] Chromium browser is already installed ✓")
            return

        logger.info("[Browser Setup] Chromium browser not found, installing automatically...")
        await install_browser()

        if not await check_browser_installation():
            raise VerificationError("Browser installation verification failed")

        logger.info("[Browser Setup] Browser installation and verification completed ✓")
    except Exception as e:
        logger.error(f"[Browser Setup] Failed to ensure browser installation: {e}")
        logger.error(f"[Browser Setup] Please try manually installing with: {MANUAL_INSTALL_HINT}")
        raise
