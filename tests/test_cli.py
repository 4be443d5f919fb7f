from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.calls: List[tuple] = []
        self.facilities: List[Dict[str, Any]] = [
            {
                "id": 1,
                "name": "Sauna 1",
                "current_temp": 91.5,
                "min_temp": 80.0,
                "max_temp": 100.0,
                "in_range": True,
                "total_votes": 3,
                "satisfaction_percent": 67,
                "recent_readings": [{"id": 2}, {"id": 1}],
            },
            {
                "id": 4,
                "name": "Cold Plunge",
                "current_temp": 12.0,
                "min_temp": 5.0,
                "max_temp": 10.0,
                "in_range": False,
                "total_votes": 0,
                "satisfaction_percent": 0,
                "recent_readings": [],
            },
        ]
        self.closed = False

    def list_facilities(self) -> List[Dict[str, Any]]:
        self.calls.append(("list_facilities",))
        return self.facilities

    def recent_readings(self, facility_id: int, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        self.calls.append(("recent_readings", facility_id, limit))
        return [
            {
                "id": 2,
                "temperature_celsius": 96.0,
                "submitted_by": "Jenny S.",
                "time_since_submission": "2m ago",
                "upvote_count": 0,
                "downvote_count": 1,
                "weighted_score": 0.0,
            }
        ]

    def submit_reading(
        self, facility_id: int, temperature: float, unit: str = "celsius", submitted_by: Optional[str] = None
    ) -> Dict[str, Any]:
        self.calls.append(("submit_reading", facility_id, temperature, unit, submitted_by))
        return {
            "id": 7,
            "facility_id": facility_id,
            "submitted_by": submitted_by or "Anonymous",
            "temperature_celsius": temperature,
            "submitted_at": "2024-01-01T00:00:00Z",
        }

    def cast_vote(self, reading_id: int, is_upvote: bool) -> Dict[str, Any]:
        self.calls.append(("cast_vote", reading_id, is_upvote))
        return {"id": 11, "reading_id": reading_id, "is_upvote": is_upvote}

    def history(self, facility_id: int, hours: Optional[int] = None) -> List[Dict[str, Any]]:
        self.calls.append(("history", facility_id, hours))
        return [{"recorded_at": "2024-01-01T00:00:00Z", "temperature": 100.0}]

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    instance = StubClient(config=None)

    def factory(config):
        instance.config = config
        return instance

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return instance


def test_facilities_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["facilities"])

    assert result.exit_code == 0
    assert "[1] Sauna 1: 91.5°C" in result.stdout
    assert "satisfaction 67% from 3 ratings, 2 recent readings" in result.stdout
    assert "[4] Cold Plunge: 12.0°C" in result.stdout
    assert stub.closed is True


def test_facilities_in_fahrenheit(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["facilities", "--fahrenheit"])

    assert result.exit_code == 0
    assert "Sauna 1: 196.7°F (range 176.0°F - 212.0°F)" in result.stdout


def test_readings_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["readings", "1", "--limit", "3"])

    assert result.exit_code == 0
    assert "#2 96.0°C by Jenny S. (2m ago) +0/-1 score=0.0" in result.stdout
    assert stub.calls == [("recent_readings", 1, 3)]


def test_submit_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["submit", "2", "185", "--unit", "fahrenheit", "--name", "Mike T."])

    assert result.exit_code == 0
    assert "Reading recorded" in result.stdout
    assert stub.calls == [("submit_reading", 2, 185.0, "fahrenheit", "Mike T.")]


def test_vote_command_defaults_to_upvote(runner: CliRunner, stub: StubClient) -> None:
    up = runner.invoke(app, ["vote", "5"])
    down = runner.invoke(app, ["vote", "5", "--down"])

    assert up.exit_code == 0
    assert "Vote 11 recorded: up on reading 5" in up.stdout
    assert "down on reading 5" in down.stdout
    assert stub.calls == [("cast_vote", 5, True), ("cast_vote", 5, False)]


def test_history_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["history", "1", "--hours", "6"])

    assert result.exit_code == 0
    assert "100.0°C" in result.stdout
    assert stub.calls == [("history", 1, 6)]


def test_base_url_option_reaches_client(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://dash.local:9000/", "facilities"])

    assert result.exit_code == 0
    assert stub.config.base_url == "http://dash.local:9000"


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://env.local")
    monkeypatch.setenv("CLI_REQUEST_TIMEOUT", "not-a-number")

    config = load_config()

    assert config == CLIConfig(base_url="http://env.local", request_timeout=30.0)


def test_api_client_reports_http_errors(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Temperature reading 9 not found."})

    client = ApiClient(CLIConfig())
    client._client = httpx.Client(base_url="http://test", transport=httpx.MockTransport(handler))

    with pytest.raises(typer.Exit) as excinfo:
        client.cast_vote(9, True)

    assert excinfo.value.exit_code == 1
    assert "Temperature reading 9 not found." in capsys.readouterr().err
    client.close()


def test_api_client_posts_reading_payload() -> None:
    seen: Dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = request.read()
        return httpx.Response(201, json={"id": 1})

    client = ApiClient(CLIConfig())
    client._client = httpx.Client(base_url="http://test", transport=httpx.MockTransport(handler))

    assert client.submit_reading(3, 45.0) == {"id": 1}
    assert seen["path"] == "/facilities/3/readings"
    assert b'"unit":"celsius"' in seen["body"].replace(b" ", b"")
    client.close()
