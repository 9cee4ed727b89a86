from __future__ import annotations

import httpx
import pytest

from mock_llm.config import MockServerConfig
from mock_llm.factory import build_dispatcher, build_server
from mock_llm.retry import backoff_delay, retry_with_backoff
from mock_llm.server import MockLLMServer, ServerStartError, parse_listen_addr


def _config() -> MockServerConfig:
    return MockServerConfig.model_validate(
        {
            "openai": [
                {
                    "name": "ping",
                    "match": {"match_type": "contains", "message": "ping"},
                    "response": {"id": "pong"},
                }
            ]
        }
    )


def test_server_serves_mocks_on_ephemeral_port() -> None:
    server = build_server(_config())
    with server as base_url:
        assert base_url.startswith("http://127.0.0.1:")
        assert server.base_url == base_url
        assert not base_url.endswith(":0")

        health = httpx.get(f"{base_url}/health", timeout=5)
        reply = httpx.post(
            f"{base_url}/v1/chat/completions",
            json={"messages": [{"role": "user", "content": "ping?"}]},
            timeout=5,
        )

    assert health.json()["openai"] == 1
    assert reply.status_code == 200
    assert reply.json() == {"id": "pong"}
    assert server.base_url is None


def test_start_is_idempotent() -> None:
    server = build_server(_config())
    try:
        first = server.start()
        assert server.start() == first
    finally:
        server.stop()


def test_start_raises_when_health_check_never_succeeds(monkeypatch) -> None:
    calls: list[str] = []

    def failing_health(base_url: str) -> None:
        calls.append(base_url)
        request = httpx.Request("GET", f"{base_url}/health")
        raise httpx.ConnectError("refused", request=request)

    monkeypatch.setattr(MockLLMServer, "_check_health", staticmethod(failing_health))
    server = MockLLMServer(
        build_dispatcher(_config()),
        health_attempts=3,
        health_initial_delay=0.01,
    )

    with pytest.raises(ServerStartError, match="Failed to health check"):
        server.start()

    assert len(calls) == 3
    assert server.base_url is None


def test_start_does_not_retry_errors_other_than_http_errors(monkeypatch) -> None:
    calls: list[str] = []

    def broken_health(base_url: str) -> None:
        calls.append(base_url)
        raise RuntimeError("broken health handler")

    monkeypatch.setattr(MockLLMServer, "_check_health", staticmethod(broken_health))
    server = MockLLMServer(build_dispatcher(_config()), health_initial_delay=0.01)

    try:
        with pytest.raises(RuntimeError, match="broken health handler"):
            server.start()
        assert len(calls) == 1
    finally:
        server.stop()


def test_build_server_uses_configured_listen_addr() -> None:
    config = _config().model_copy(update={"listen_addr": "127.0.0.1:0"})

    with build_server(config) as base_url:
        assert base_url.startswith("http://127.0.0.1:")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("127.0.0.1:8080", ("127.0.0.1", 8080)),
        ("0.0.0.0:0", ("0.0.0.0", 0)),
        (":9000", ("0.0.0.0", 9000)),
        ("[::1]:7000", ("::1", 7000)),
    ],
)
def test_parse_listen_addr(value: str, expected: tuple[str, int]) -> None:
    assert parse_listen_addr(value) == expected


@pytest.mark.parametrize("value", ["localhost", "127.0.0.1:http"])
def test_parse_listen_addr_rejects_invalid_values(value: str) -> None:
    with pytest.raises(ValueError):
        parse_listen_addr(value)


def test_retry_with_backoff_doubles_delay_up_to_cap() -> None:
    delays: list[float] = []
    attempts: list[int] = []

    def always_fails() -> None:
        attempts.append(1)
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        retry_with_backoff(
            always_fails,
            attempts=5,
            initial_delay=1.0,
            max_delay=3.0,
            sleep=delays.append,
        )

    assert len(attempts) == 5
    assert delays == [1.0, 2.0, 3.0, 3.0]


def test_retry_with_backoff_returns_first_success() -> None:
    delays: list[float] = []
    outcomes = iter([RuntimeError("boom"), "ready"])

    def flaky() -> str:
        outcome = next(outcomes)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assert retry_with_backoff(flaky, initial_delay=0.5, sleep=delays.append) == "ready"
    assert delays == [0.5]


def test_retry_with_backoff_does_not_retry_unlisted_errors() -> None:
    calls: list[int] = []

    def fails() -> None:
        calls.append(1)
        raise KeyError("nope")

    with pytest.raises(KeyError):
        retry_with_backoff(fails, retry_on=(ConnectionError,), sleep=lambda _: None)

    assert calls == [1]


def test_backoff_delay_defaults_match_startup_policy() -> None:
    assert [backoff_delay(attempt, 0.5, 5.0) for attempt in range(5)] == [0.5, 1.0, 2.0, 4.0, 5.0]
