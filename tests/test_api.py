from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(scope="module")
def api_client() -> Iterable[TestClient]:
    from orrery_api import app

    with TestClient(app) as client:
        yield client


def _bodies(payload: dict) -> dict:
    return {entry["body"]: entry for entry in payload["bodies"]}


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert len(payload["bodies"]) == 8
    assert payload["reference_epoch"].startswith("2000-01-01T00:00:00")


def test_cities_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/cities")
    assert response.status_code == 200
    names = [city["name"] for city in response.json()]
    assert names == ["北京", "上海", "西安", "南京", "洛阳", "成都"]


def test_calendar_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/calendar", params={"time": "2024-02-10T12:00:00Z"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["year"] == "甲辰"
    assert payload["month"] == "乙丑"
    assert payload["solar_term"]["index"] == 2
    assert payload["solar_term"]["name"] == "惊蛰"


def test_snapshot_at_reference_epoch(api_client: TestClient) -> None:
    response = api_client.get("/snapshot", params={"time": "2000-01-01T00:00:00Z"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["mode"] == "orbital"
    assert payload["observer"]["name"] == "北京"
    bodies = _bodies(payload)
    assert len(bodies) == 8
    assert bodies["earth"]["name"] == "地球"
    assert bodies["earth"]["position"] == pytest.approx({"x": 24.0, "y": 0.0, "z": 0.0})
    assert bodies["sun"]["position"] == {"x": 0.0, "y": 0.0, "z": 0.0}
    assert bodies["moon"]["position"]["x"] == pytest.approx(26.0)
    assert len(payload["term_markers"]) == 24
    assert sum(marker["current"] for marker in payload["term_markers"]) == 1


def test_snapshot_horizon_mode(api_client: TestClient) -> None:
    response = api_client.get(
        "/snapshot",
        params={"time": "2024-02-10T12:00:00Z", "mode": "horizon", "lat": 31.2, "lon": 121.5},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["mode"] == "horizon"
    assert payload["observer"]["name"] == "自定义"
    bodies = _bodies(payload)
    assert any(entry["position"]["y"] != 0.0 for entry in bodies.values())


def test_snapshot_validation_error(api_client: TestClient) -> None:
    response = api_client.get("/snapshot", params={"lat": 95, "lon": 0})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_snapshot_requires_lat_and_lon_together(api_client: TestClient) -> None:
    response = api_client.get("/snapshot", params={"lat": 30})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_snapshot_unknown_city(api_client: TestClient) -> None:
    response = api_client.get("/snapshot", params={"city": "东京"})
    assert response.status_code == 404
    payload = response.json()
    assert payload["code"] == "http_404"
    assert "东京" in payload["error"]


def test_jiazi_table(api_client: TestClient) -> None:
    response = api_client.get("/jiazi", params={"reference_year": 2026})
    assert response.status_code == 200
    payload = response.json()
    assert payload["reference_year"] == 2026
    entries = payload["entries"]
    assert len(entries) == 60
    assert entries[0] == {"name": "甲子", "cycle_index": 0, "anchor_year": 1984, "body": "mercury"}


def test_jiazi_resolution(api_client: TestClient) -> None:
    response = api_client.get("/jiazi/壬寅", params={"reference_year": 2026})
    assert response.status_code == 200
    payload = response.json()
    assert payload["anchor_year"] == 2022
    assert payload["body"] == "jupiter"


def test_jiazi_resolution_rejects_bad_name(api_client: TestClient) -> None:
    response = api_client.get("/jiazi/abc")
    assert response.status_code == 400
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "http_400"
