"""Factories for constructing components from configuration."""

from __future__ import annotations

from fastapi import FastAPI

from .config import MockServerConfig
from .dispatcher import MockDispatcher
from .registry import build_registries
from .server import MockLLMServer
from .service import create_app


def build_dispatcher(config: MockServerConfig) -> MockDispatcher:
    return MockDispatcher(build_registries(config))


def build_app(config: MockServerConfig) -> FastAPI:
    return create_app(build_dispatcher(config))


def build_server(config: MockServerConfig) -> MockLLMServer:
    return MockLLMServer(build_dispatcher(config), listen_addr=config.resolved_listen_addr())
