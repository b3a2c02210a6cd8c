"""
Unit tests for the middleware module.

Covers:
- Request timing header and trace log line
- Excluded paths
- CORS configuration from settings
"""

from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bibliocore.config import TestingSettings
from bibliocore.middleware import TimingMiddleware, add_cors_middleware, setup_middlewares


@pytest.fixture
def logger():
    return MagicMock()


def make_app():
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/metrics")
    async def metrics():
        return {}

    return app


def test_timing_header_and_log(logger):
    app = make_app()
    app.add_middleware(TimingMiddleware, header_name="X-Process-Time", logger=logger)
    response = TestClient(app).get("/ping")
    assert response.headers["X-Process-Time"].endswith("ms")
    message = logger.info.call_args.args[0]
    assert message.startswith("GET /ping -> 200 in ")


def test_timing_excluded_path(logger):
    app = make_app()
    app.add_middleware(TimingMiddleware, exclude_paths=["/metrics"], logger=logger)
    response = TestClient(app).get("/metrics")
    assert "X-Process-Time" not in response.headers
    logger.info.assert_not_called()


def test_timing_without_header(logger):
    app = make_app()
    app.add_middleware(TimingMiddleware, header_name="", logger=logger)
    response = TestClient(app).get("/ping")
    assert "X-Process-Time" not in response.headers
    logger.info.assert_called_once()


def test_cors_headers(logger):
    app = make_app()
    add_cors_middleware(app, TestingSettings(), logger)
    response = TestClient(app).get("/ping", headers={"Origin": "http://opac.example"})
    assert response.headers["access-control-allow-origin"] == "*"


def test_setup_middlewares(logger):
    app = make_app()
    settings = TestingSettings(REQUEST_TIMING_HEADER="X-Elapsed")
    setup_middlewares(app, settings, logger)
    client = TestClient(app)
    assert "X-Elapsed" in client.get("/ping").headers
    assert "X-Elapsed" not in client.get("/metrics").headers
