"""Adapter for the Anthropic Messages API."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from ..matching.normalize import MalformedMatchValue
from ..models import Value, Vendor
from .base import ProviderAdapter


class AnthropicMessageParam(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str
    content: Union[str, list[dict[str, Any]]]


class AnthropicMessagesRequest(BaseModel):
    """Body of ``POST /v1/messages``."""

    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    max_tokens: Optional[int] = None
    messages: list[AnthropicMessageParam] = Field(default_factory=list)


class AnthropicAdapter(ProviderAdapter):
    """Anthropic accepts ``content`` as a plain string or a list of blocks.

    Both forms are rewritten to the block list so a fixture written with the
    shorthand compares equal to a request that spells out its text block.
    """

    vendor = Vendor.ANTHROPIC
    request_model = AnthropicMessagesRequest

    def conversation(  # type: ignore[override]
        self, request: AnthropicMessagesRequest
    ) -> Sequence[Any]:
        return request.messages

    def normalize_fields(self, message: dict[str, Value]) -> Value:
        if "content" not in message:
            return message
        content = message["content"]
        if isinstance(content, str):
            return {**message, "content": [{"type": "text", "text": content}]}
        if content is not None and not isinstance(content, list):
            raise MalformedMatchValue(
                f"Anthropic content must be a string or a list of blocks, got {content!r}"
            )
        return message
