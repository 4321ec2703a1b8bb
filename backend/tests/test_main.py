"""
Tests for the HTTP API and the command line entry point.
"""

import importlib

import pytest
from fastapi.testclient import TestClient
from playwright.async_api import Error as PlaywrightError

import config
import main
from services.browser_installer import InstallResult

browser_install_module = importlib.import_module("tools.browser_install")


@pytest.fixture
def client():
    # Ohne Context-Manager laufen keine Startup-Events (kein Browser-Check)
    return TestClient(main.app)


def test_health_endpoints(client):
    assert client.get("/health/live").json()["status"] == "alive"
    assert client.get("/health/ready").json()["status"] == "ready"


def test_list_tools(client):
    response = client.get("/tools")

    assert response.status_code == 200
    assert [tool["name"] for tool in response.json()] == [
        "fetch_url", "fetch_urls", "download_url", "browser_install",
    ]


def test_unknown_tool_is_404(client):
    response = client.post("/tools/crawl_site", json={})

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == {
        "code": "UNKNOWN_TOOL",
        "message": "Unknown tool: crawl_site",
    }


def test_disallowed_scheme_is_400(client):
    response = client.post("/tools/fetch_url", json={"url": "file:///etc/passwd"})

    assert response.status_code == 400
    assert response.json()["detail"]["error"]["code"] == "URL_SECURITY_ERROR"


def test_missing_argument_is_400(client):
    response = client.post("/tools/download_url", json={"url": "https://example.com"})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == {
        "code": "INVALID_INPUT",
        "message": "filePath parameter is required",
    }


def test_navigation_error_is_502(client, site, tmp_path):
    site.add("https://example.com/empty", no_response=True)

    response = client.post(
        "/tools/download_url",
        json={"url": "https://example.com/empty", "filePath": str(tmp_path / "out.html")},
    )

    assert response.status_code == 502
    assert response.json()["detail"]["error"]["code"] == "NAVIGATION_ERROR"


def test_navigation_timeout_is_502(client, site, tmp_path):
    response = client.post(
        "/tools/download_url",
        json={"url": "https://unreachable.example/", "filePath": str(tmp_path / "out.html")},
    )

    assert response.status_code == 502
    error = response.json()["detail"]["error"]
    assert error["code"] == "NAVIGATION_ERROR"
    assert error["message"].startswith("Failed to navigate to https://unreachable.example/")


def test_browser_error_outside_navigation_has_error_body(client, monkeypatch):
    async def failing_call_tool(name, arguments):
        raise PlaywrightError("Executable doesn't exist at /ms-playwright/chromium")

    monkeypatch.setattr(main, "call_tool", failing_call_tool)

    response = client.post("/tools/fetch_url", json={"url": "https://example.com"})

    assert response.status_code == 502
    assert response.json()["detail"]["error"] == {
        "code": "NAVIGATION_ERROR",
        "message": "Executable doesn't exist at /ms-playwright/chromium",
    }


def test_tool_result_body(client, monkeypatch):
    async def fake_install(with_deps=False, force=False):
        return InstallResult(success=True, exit_code=0, stdout="ok", stderr="", command="x")

    monkeypatch.setattr(browser_install_module, "install_browser", fake_install)

    response = client.post("/tools/browser_install")

    assert response.status_code == 200
    assert response.json() == {
        "content": [{"type": "text", "text": "✅ Successfully installed Chromium browser\n\nok"}],
    }


def test_startup_failure_only_logs(monkeypatch, caplog):
    async def failing_ensure():
        raise main.FetcherError("no network")

    monkeypatch.setattr(config, "ENSURE_BROWSER_ON_STARTUP", True)
    monkeypatch.setattr(main, "ensure_browser_installed", failing_ensure)

    with TestClient(main.app) as client:
        assert client.get("/health/live").status_code == 200

    assert "Browser setup failed: no network" in caplog.text


class TestCommandLine:
    def test_http_transport(self, monkeypatch):
        calls = []
        monkeypatch.setattr("uvicorn.run", lambda app, **kwargs: calls.append(kwargs))
        monkeypatch.setattr(config, "ENSURE_BROWSER_ON_STARTUP", True)

        main.main(["--transport", "http", "--port", "9123", "--debug", "--skip-browser-check"])

        assert calls == [{"host": config.HOST, "port": 9123, "log_level": config.LOG_LEVEL.lower()}]
        assert config.is_debug_mode() is True
        assert config.ENSURE_BROWSER_ON_STARTUP is False

    def test_stdio_transport_is_default(self, monkeypatch):
        calls = []

        async def fake_run_stdio(check_browser):
            calls.append(check_browser)

        monkeypatch.setattr(main, "_run_stdio", fake_run_stdio)
        monkeypatch.setattr(config, "ENSURE_BROWSER_ON_STARTUP", True)
        monkeypatch.setattr(config, "TRANSPORT", "stdio")

        main.main([])

        assert calls == [True]
        assert config.is_debug_mode() is False

    def test_rejects_unknown_transport(self):
        with pytest.raises(SystemExit):
            main.main(["--transport", "websocket"])
