import json
from typing import Any

import httpx
import pytest
from conftest import ENDPOINT, RecordingServer

from sta_client import cli
from sta_client.cli import load_observations, main


@pytest.fixture
def observations_file(tmp_path: Any) -> str:
    path = tmp_path / "observations.json"
    path.write_text(
        json.dumps(
            [
                {"datastream_id": 1, "phenomenon_time": "2024-05-01T00:00:00Z", "result": 20.5},
                {"datastream_id": 1, "phenomenonTime": "2024-05-01T00:10:00Z", "result": 20.7},
            ]
        )
    )
    return str(path)


def test_load_observations(observations_file: str) -> None:
    observations = load_observations(observations_file)

    assert [o.datastream.id for o in observations] == [1, 1]
    assert [o.phenomenon_time for o in observations] == ["2024-05-01T00:00:00Z", "2024-05-01T00:10:00Z"]


def test_load_observations_requires_array(tmp_path: Any) -> None:
    path = tmp_path / "bad.json"
    path.write_text('{"result": 1}')

    with pytest.raises(ValueError):
        load_observations(str(path))


def test_main_prints_created_ids(observations_file: str, capsys: Any) -> None:
    server = RecordingServer(201, json.dumps(["Observations(11)", "error: duplicate"]))

    code = main([observations_file, "--endpoint", ENDPOINT], transport=httpx.MockTransport(server))

    assert code == 0
    assert str(server.requests[0].url) == ENDPOINT + "CreateObservations"
    output = json.loads(capsys.readouterr().out)
    assert output == [
        {"location": "Observations(11)", "id": 11},
        {"location": "error: duplicate", "id": None},
    ]


def test_main_sends_requested_components(observations_file: str) -> None:
    server = RecordingServer(201, json.dumps(["Observations(1)", "Observations(2)"]))

    main(
        [observations_file, "--endpoint", ENDPOINT, "--components", "result", "phenomenonTime"],
        transport=httpx.MockTransport(server),
    )

    payload = json.loads(server.requests[0].content)
    assert payload[0]["components"] == ["result", "phenomenonTime"]


def test_main_reports_rejection(observations_file: str, capsys: Any) -> None:
    server = RecordingServer(500, b"boom")

    code = main([observations_file, "--endpoint", ENDPOINT], transport=httpx.MockTransport(server))

    assert code == 1
    assert "boom" in capsys.readouterr().err


def test_main_uses_config_file(observations_file: str, tmp_path: Any) -> None:
    config_path = tmp_path / "sta.yaml"
    config_path.write_text(f"endpoint: {ENDPOINT}\nlog_level: DEBUG\n")
    server = RecordingServer(201, json.dumps(["Observations(1)", "Observations(2)"]))

    code = main([observations_file, "--config", str(config_path)], transport=httpx.MockTransport(server))

    assert code == 0
    assert len(server.requests) == 1


def test_main_without_endpoint(observations_file: str, capsys: Any) -> None:
    assert main([observations_file]) == 2
    assert "endpoint" in capsys.readouterr().err.lower()


def test_main_rejects_invalid_input(tmp_path: Any, capsys: Any) -> None:
    path = tmp_path / "observations.json"
    path.write_text(json.dumps([{"result": 1}]))
    server = RecordingServer()

    code = main([str(path), "--endpoint", ENDPOINT], transport=httpx.MockTransport(server))

    assert code == 2
    assert server.requests == []
    assert "Invalid input" in capsys.readouterr().err


def record_basic_config(monkeypatch: Any) -> list[dict]:
    calls: list[dict] = []
    monkeypatch.setattr(cli.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    return calls


def test_log_level_flag_wins_over_environment(observations_file: str, monkeypatch: Any) -> None:
    monkeypatch.setenv("STA_LOG_LEVEL", "ERROR")
    calls = record_basic_config(monkeypatch)
    server = RecordingServer(201, json.dumps(["Observations(1)", "Observations(2)"]))

    code = main(
        [observations_file, "--endpoint", ENDPOINT, "--log-level", "debug"], transport=httpx.MockTransport(server)
    )

    assert code == 0
    assert calls[0]["level"] == "DEBUG"


def test_environment_log_level_used_without_flag(observations_file: str, monkeypatch: Any) -> None:
    monkeypatch.setenv("STA_LOG_LEVEL", "ERROR")
    calls = record_basic_config(monkeypatch)
    server = RecordingServer(201, json.dumps(["Observations(1)", "Observations(2)"]))

    main([observations_file, "--endpoint", ENDPOINT], transport=httpx.MockTransport(server))

    assert calls[0]["level"] == "ERROR"


def test_flags_win_over_config_file_and_environment(observations_file: str, tmp_path: Any, monkeypatch: Any) -> None:
    monkeypatch.setenv("STA_LOG_LEVEL", "ERROR")
    calls = record_basic_config(monkeypatch)
    config_path = tmp_path / "sta.yaml"
    config_path.write_text("endpoint: http://from-file.example.org/v1.1/\nlog_level: WARNING\n")
    server = RecordingServer(201, json.dumps(["Observations(1)", "Observations(2)"]))

    code = main(
        [observations_file, "--config", str(config_path), "--endpoint", ENDPOINT, "--log-level", "DEBUG"],
        transport=httpx.MockTransport(server),
    )

    assert code == 0
    assert calls[0]["level"] == "DEBUG"
    assert str(server.requests[0].url) == ENDPOINT + "CreateObservations"


def test_invalid_log_level_flag(observations_file: str, capsys: Any) -> None:
    assert main([observations_file, "--endpoint", ENDPOINT, "--log-level", "LOUD"]) == 2
    assert "Log level" in capsys.readouterr().err
