from __future__ import annotations

import json
import sys
import types
from pathlib import Path

from fastapi import FastAPI
from typer.testing import CliRunner

from mock_llm.cli import app

CONFIG = """
openai:
  - name: greeting
    match:
      match_type: contains
      message: {role: user, content: hello}
    response: {id: chatcmpl-1, choices: []}
  - name: fallback
    match:
      match_type: contains
      message: {role: user}
    response: {id: chatcmpl-2}
anthropic:
  - name: strict-claude
    match:
      match_type: exact
      message: {role: user, content: hi}
    response: {id: msg_1}
"""


def _write_config(tmp_path: Path) -> Path:
    config_path = tmp_path / "mocks.yaml"
    config_path.write_text(CONFIG)
    return config_path


def _write_request(tmp_path: Path, payload: dict[str, object]) -> Path:
    request_path = tmp_path / "request.json"
    request_path.write_text(json.dumps(payload))
    return request_path


def test_check_lists_mocks_in_match_order(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["check", "--config", str(_write_config(tmp_path))])

    assert result.exit_code == 0
    assert "greeting" in result.stdout
    assert "fallback" in result.stdout
    assert "strict-claude" in result.stdout
    assert result.stdout.index("greeting") < result.stdout.index("fallback")


def test_check_reports_invalid_config(tmp_path: Path) -> None:
    runner = CliRunner()
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("openai:\n  - name: x\n    match: {match_type: regex}\n")

    result = runner.invoke(app, ["check", "--config", str(config_path)])

    assert result.exit_code == 2
    assert "Invalid configuration" in result.output


def test_match_prints_first_matching_mock(tmp_path: Path) -> None:
    runner = CliRunner()
    request_path = _write_request(
        tmp_path,
        {"model": "gpt-4o", "messages": [{"role": "user", "content": "hello there"}]},
    )

    result = runner.invoke(
        app,
        [
            "match",
            str(request_path),
            "--vendor",
            "openai",
            "--config",
            str(_write_config(tmp_path)),
        ],
    )

    assert result.exit_code == 0
    assert "Matched mock: greeting" in result.stdout
    assert '"chatcmpl-1"' in result.stdout


def test_match_exits_with_one_when_nothing_matches(tmp_path: Path) -> None:
    runner = CliRunner()
    request_path = _write_request(
        tmp_path,
        {"messages": [{"role": "user", "content": "hi", "metadata": {"a": 1}}]},
    )

    result = runner.invoke(
        app,
        [
            "match",
            str(request_path),
            "--vendor",
            "anthropic",
            "--config",
            str(_write_config(tmp_path)),
        ],
    )

    assert result.exit_code == 1
    assert "No matching mock found." in result.stdout


def test_match_rejects_invalid_request_body(tmp_path: Path) -> None:
    runner = CliRunner()
    request_path = tmp_path / "request.json"
    request_path.write_text("{broken")

    result = runner.invoke(
        app,
        [
            "match",
            str(request_path),
            "--vendor",
            "google",
            "--config",
            str(_write_config(tmp_path)),
        ],
    )

    assert result.exit_code == 2
    assert "Invalid request" in result.output


def test_serve_command_invokes_uvicorn(monkeypatch, tmp_path: Path) -> None:
    runner = CliRunner()

    calls: list[dict[str, object]] = []

    def fake_run(app, host, port):  # type: ignore[no-untyped-def]
        calls.append({"app": app, "host": host, "port": port})

    dummy_uvicorn = types.SimpleNamespace(run=fake_run)
    monkeypatch.setitem(sys.modules, "uvicorn", dummy_uvicorn)

    result = runner.invoke(
        app,
        [
            "serve",
            "--config",
            str(_write_config(tmp_path)),
            "--listen-addr",
            "127.0.0.1:9100",
        ],
    )

    assert result.exit_code == 0
    assert "Loaded 2 OpenAI, 1 Anthropic and 0 Google mocks" in result.stdout
    assert len(calls) == 1
    call = calls[0]
    assert isinstance(call["app"], FastAPI)
    assert call["host"] == "127.0.0.1"
    assert call["port"] == 9100


def test_serve_rejects_bad_listen_addr(monkeypatch, tmp_path: Path) -> None:
    runner = CliRunner()
    monkeypatch.setitem(sys.modules, "uvicorn", types.SimpleNamespace(run=lambda *a, **k: None))

    result = runner.invoke(
        app,
        ["serve", "--config", str(_write_config(tmp_path)), "--listen-addr", "nowhere"],
    )

    assert result.exit_code == 2
