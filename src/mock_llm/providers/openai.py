"""Adapter for the OpenAI Chat Completions API."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..models import Vendor
from .base import ProviderAdapter


class OpenAIMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str
    content: Any = None


class OpenAIChatRequest(BaseModel):
    """Body of ``POST /v1/chat/completions``."""

    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    messages: list[OpenAIMessage] = Field(default_factory=list)


class OpenAIAdapter(ProviderAdapter):
    vendor = Vendor.OPENAI
    request_model = OpenAIChatRequest

    def conversation(  # type: ignore[override]
        self, request: OpenAIChatRequest
    ) -> Sequence[Any]:
        return request.messages
