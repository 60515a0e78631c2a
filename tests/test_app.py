"""Tests for the application factory."""

import logging
from dataclasses import replace

from fastapi.testclient import TestClient

from calorie_tracker.api.app import create_app
from calorie_tracker.config import Settings
from calorie_tracker.containers import build_container
from calorie_tracker.errors import NotFoundError


def test_create_app_wires_logging_errors_and_lifespan(settings: Settings) -> None:
    closed: list[bool] = []

    async def close_resources() -> None:
        closed.append(True)

    container = replace(build_container(settings), close_resources=close_resources)
    logging.getLogger("calorie_tracker").handlers.clear()
    app = create_app(container)

    @app.get("/products/{product_id}")
    async def get_product(product_id: str) -> dict[str, str]:
        raise NotFoundError("product not found")

    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok"}
        response = client.get("/products/abc")

    assert response.status_code == 404
    assert response.json()["message"] == "product not found"
    assert app.state.container is container
    assert len(logging.getLogger("calorie_tracker").handlers) == 1
    assert closed == [True]
