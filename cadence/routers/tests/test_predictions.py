"""Tests for the prediction and health endpoints."""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from cadence.config import Settings
from cadence.dependencies import get_clock, get_engine_config
from cadence.main import create_app
from cadence.prediction import config_loader
from cadence.prediction.config_loader import reload_prediction_config

TEST_TODAY = date(2026, 2, 23)


def _period(start: date, length: int | None = 5) -> dict:
    end = (start + timedelta(days=length - 1)).isoformat() if length else None
    return {"start_date": start.isoformat(), "end_date": end}


# Last period 2026-02-19, cycle 28: next start 2026-03-19
REGULAR_PERIODS = [
    _period(date(2025, 12, 25)),
    _period(date(2026, 1, 22)),
    _period(date(2026, 2, 19)),
]


@pytest.fixture
def client() -> Iterator[TestClient]:
    app = create_app()
    app.dependency_overrides[get_clock] = lambda: (lambda: TEST_TODAY)
    with TestClient(app) as c:
        yield c


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["prediction_config"] == "1.0"


class TestNextPeriod:
    def test_no_history_falls_back_to_settings(self, client: TestClient) -> None:
        resp = client.post("/api/v1/predictions/next", json={"periods": []})
        assert resp.status_code == 200
        body = resp.json()
        assert body["next_start"] is None
        assert body["reminder_date"] is None
        assert body["window"]["start_date"] == "2026-03-23"
        assert body["window"]["length_days"] == 5
        assert body["estimated_cycle_length"] == 28

    def test_regular_history(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/next",
            json={"periods": REGULAR_PERIODS, "cycle_length": 28, "period_length": 5},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["next_start"] == "2026-03-19"
        assert body["reminder_date"] == "2026-03-18"
        assert body["window"] == {
            "start_date": "2026-03-19",
            "end_date": "2026-03-23",
            "length_days": 5,
        }
        assert body["estimated_period_length"] == 5

    def test_end_before_start_rejected(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/next",
            json={"periods": [{"start_date": "2026-02-10", "end_date": "2026-02-01"}]},
        )
        assert resp.status_code == 422

    def test_out_of_range_setting_rejected(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/next", json={"periods": [], "cycle_length": 0}
        )
        assert resp.status_code == 422

    def test_start_date_far_in_future_rejected(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/next",
            json={"periods": [{"start_date": "9999-12-01", "end_date": None}]},
        )
        assert resp.status_code == 422


class TestForecast:
    def test_by_count(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/forecast",
            json={"periods": REGULAR_PERIODS, "count": 3},
        )
        assert resp.status_code == 200
        starts = [w["start_date"] for w in resp.json()["windows"]]
        assert starts == ["2026-03-19", "2026-04-16", "2026-05-14"]

    def test_zero_count_is_empty(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/forecast",
            json={"periods": REGULAR_PERIODS, "count": 0},
        )
        assert resp.status_code == 200
        assert resp.json()["windows"] == []

    def test_until_before_first_start_returns_one(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/forecast",
            json={"periods": REGULAR_PERIODS, "until": "2026-02-23"},
        )
        assert resp.status_code == 200
        assert len(resp.json()["windows"]) == 1

    @pytest.mark.parametrize(
        "extra",
        [{}, {"count": 2, "until": "2026-06-01"}],
    )
    def test_requires_exactly_one_bound(self, client: TestClient, extra: dict) -> None:
        resp = client.post(
            "/api/v1/predictions/forecast",
            json={"periods": REGULAR_PERIODS, **extra},
        )
        assert resp.status_code == 400

    def test_until_near_calendar_end_rejected(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/forecast",
            json={"periods": [], "until": "9999-12-20"},
        )
        assert resp.status_code == 422


class TestPhase:
    def test_phase_for_today(self, client: TestClient) -> None:
        resp = client.post("/api/v1/predictions/phase", json={"periods": REGULAR_PERIODS})
        assert resp.status_code == 200
        body = resp.json()
        assert body["day"] == "2026-02-23"
        assert body["phase"] == "menstrual"
        assert body["cycle_day"] == 5
        assert body["is_predicted_period_day"] is False

    def test_phase_for_given_day(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/phase",
            json={"periods": REGULAR_PERIODS, "day": "2026-03-05"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["phase"] == "ovulation"
        assert body["in_fertile_window"] is True

    def test_day_inside_next_predicted_window(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/phase",
            json={"periods": REGULAR_PERIODS, "day": "2026-03-20"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["phase"] == "menstrual"
        assert body["cycle_start"] == "2026-03-19"
        assert body["is_projected"] is True
        assert body["is_overdue"] is False
        assert body["is_predicted_period_day"] is True

    def test_day_far_in_future_rejected(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/phase",
            json={"periods": REGULAR_PERIODS, "day": "9999-12-31"},
        )
        assert resp.status_code == 422

    def test_no_period_before_day(self, client: TestClient) -> None:
        resp = client.post("/api/v1/predictions/phase", json={"periods": []})
        assert resp.status_code == 404


class TestStats:
    def test_outlier_excluded(self, client: TestClient) -> None:
        periods = REGULAR_PERIODS[:1] + [_period(date(2026, 5, 1))]
        resp = client.post("/api/v1/predictions/stats", json={"periods": periods})
        assert resp.status_code == 200
        body = resp.json()
        assert body["cycle_lengths"] == []
        assert body["excluded_cycle_count"] == 1
        assert body["avg_cycle_length"] is None
        assert body["period_count"] == 2

    def test_averages(self, client: TestClient) -> None:
        resp = client.post(
            "/api/v1/predictions/stats",
            json={"periods": REGULAR_PERIODS + [_period(date(2026, 3, 19), None)]},
        )
        body = resp.json()
        assert body["avg_cycle_length"] == 28.0
        assert body["avg_period_length"] == 5.0
        assert [p["length"] for p in body["cycle_lengths"]] == [28, 28, 28]


class TestEngineConfig:
    @pytest.fixture(autouse=True)
    def _reset_singleton(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config_loader, "_config", None)
        monkeypatch.setattr(config_loader, "_config_path", config_loader._CONFIG_PATH)

    def test_bundled_config_without_override(self) -> None:
        assert get_engine_config(Settings(prediction_config_path=None)).version == "1.0"

    def test_override_file_follows_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "override.yaml"
        path.write_text('version: "2.0"\n')
        settings = Settings(prediction_config_path=str(path))
        assert get_engine_config(settings).version == "2.0"

        path.write_text('version: "2.1"\n')
        reload_prediction_config()
        assert get_engine_config(settings).version == "2.1"
