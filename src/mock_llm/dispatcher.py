"""Selection of canned responses for inbound conversations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel

from .matching.matcher import matches
from .matching.normalize import MalformedMatchValue
from .models import MockEntry, Vendor
from .providers.anthropic import AnthropicAdapter
from .providers.base import ProviderAdapter
from .providers.google import GoogleAdapter
from .providers.openai import OpenAIAdapter
from .registry import MockRegistry

LOGGER = logging.getLogger(__name__)


def default_adapters() -> dict[Vendor, ProviderAdapter]:
    return {
        Vendor.OPENAI: OpenAIAdapter(),
        Vendor.ANTHROPIC: AnthropicAdapter(),
        Vendor.GOOGLE: GoogleAdapter(),
    }


def dispatch(
    registry: MockRegistry,
    adapter: ProviderAdapter,
    request: BaseModel,
) -> Optional[MockEntry]:
    """Return the first entry of *registry* matching the tail of *request*.

    An empty conversation never matches. Entries whose stored match value
    cannot be normalised are skipped. ``None`` means no entry matched, which
    is an ordinary outcome rather than an error.
    """

    try:
        tail, found = adapter.extract_tail_message(request)
    except MalformedMatchValue as exc:
        LOGGER.warning("Could not normalise %s request tail: %s", registry.vendor.value, exc)
        return None
    if not found:
        LOGGER.debug("Empty %s conversation, nothing to match", registry.vendor.value)
        return None

    for entry in registry:
        try:
            expected = adapter.extract_expected_value(entry.match)
        except MalformedMatchValue as exc:
            LOGGER.warning("Skipping %s mock %r: %s", registry.vendor.value, entry.name, exc)
            continue
        if matches(entry.match_mode, expected, tail):
            LOGGER.debug("Matched %s mock %r", registry.vendor.value, entry.name)
            return entry
    return None


class MockDispatcher:
    """Per-vendor registries paired with the adapters that read their payloads."""

    def __init__(
        self,
        registries: Mapping[Vendor, MockRegistry],
        adapters: Optional[Mapping[Vendor, ProviderAdapter]] = None,
    ) -> None:
        self._adapters = dict(adapters or default_adapters())
        self._registries = {
            vendor: registries.get(vendor, MockRegistry(vendor=vendor))
            for vendor in self._adapters
        }

    def adapter(self, vendor: Vendor) -> ProviderAdapter:
        return self._adapters[vendor]

    def registry(self, vendor: Vendor) -> MockRegistry:
        return self._registries[vendor]

    def match_request(self, vendor: Vendor, conversation: BaseModel) -> Optional[MockEntry]:
        """Return the mock answering *conversation*, or ``None`` when nothing matches."""

        return dispatch(self._registries[vendor], self._adapters[vendor], conversation)

    def counts(self) -> dict[str, int]:
        return {vendor.value: len(registry) for vendor, registry in self._registries.items()}
