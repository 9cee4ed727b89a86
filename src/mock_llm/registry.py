"""Immutable, order-preserving collections of mock entries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Union

from .config import (
    AnthropicMockConfig,
    GoogleMockConfig,
    MockServerConfig,
    OpenAIMockConfig,
)
from .models import MockEntry, Vendor

MockConfig = Union[OpenAIMockConfig, AnthropicMockConfig, GoogleMockConfig]

MATCH_FIELDS = {
    Vendor.OPENAI: "message",
    Vendor.ANTHROPIC: "message",
    Vendor.GOOGLE: "content",
}


@dataclass(frozen=True)
class MockRegistry:
    """Mock entries for one vendor in registration order.

    The first entry that matches a request wins, so the order given by the
    configuration is kept exactly.
    """

    vendor: Vendor
    entries: tuple[MockEntry, ...] = ()

    @classmethod
    def from_entries(cls, vendor: Vendor, entries: Iterable[MockEntry]) -> "MockRegistry":
        return cls(vendor=vendor, entries=tuple(entries))

    def __iter__(self) -> Iterator[MockEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def entry_from_config(vendor: Vendor, mock: MockConfig) -> MockEntry:
    return MockEntry(
        name=mock.name,
        match_mode=mock.match.match_type,
        match=getattr(mock.match, MATCH_FIELDS[vendor]),
        response=mock.response,
    )


def build_registries(config: MockServerConfig) -> dict[Vendor, MockRegistry]:
    """Build one registry per vendor from a loaded configuration."""

    sections: dict[Vendor, list[MockConfig]] = {
        Vendor.OPENAI: list(config.openai),
        Vendor.ANTHROPIC: list(config.anthropic),
        Vendor.GOOGLE: list(config.google),
    }
    return {
        vendor: MockRegistry.from_entries(
            vendor, (entry_from_config(vendor, mock) for mock in mocks)
        )
        for vendor, mocks in sections.items()
    }
