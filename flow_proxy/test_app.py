import logging
import runpy
from unittest.mock import patch

from fastapi.testclient import TestClient

from flow_proxy import server


def test_cors_preflight(client):
    r = client.options(
        "/flow",
        headers={
            "Origin": "https://business.facebook.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"


def test_cors_header_on_simple_request(client):
    r = client.get("/health", headers={"Origin": "https://example.org"})
    assert r.headers["access-control-allow-origin"] == "*"


def test_metrics_exposed(client):
    client.get("/health")
    r = client.get("/metrics")
    assert r.status_code == 200
    assert "fastapi_app_info" in r.text


def test_startup_logs_routes(caplog):
    caplog.set_level(logging.INFO, logger="uvicorn.error")
    with TestClient(server.app):
        pass
    assert f"running on port {server.PORT}" in caplog.text
    assert f"http://localhost:{server.PORT}/health" in caplog.text
    assert f"POST http://localhost:{server.PORT}/config/base-url" in caplog.text


def test_main_runs_uvicorn():
    with patch("flow_proxy.server.uvicorn.run") as mock_run:
        server.main()
    mock_run.assert_called_once_with(server.app, host=server.HOST, port=server.PORT)


def test_module_entry_point_runs_only_as_main():
    with patch("flow_proxy.server.uvicorn.run") as mock_run:
        runpy.run_module("flow_proxy", run_name="flow_proxy.__main__")
        mock_run.assert_not_called()

        runpy.run_module("flow_proxy", run_name="__main__")
    mock_run.assert_called_once_with(server.app, host=server.HOST, port=server.PORT)
