"""Adapter for the Google Generate Content API."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..matching.normalize import MalformedMatchValue
from ..models import Value, Vendor
from .base import ProviderAdapter


class GoogleContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    parts: Optional[list[dict[str, Any]]] = None


class GoogleGenerateContentRequest(BaseModel):
    """Body of ``POST /v1beta/models/{model}:generateContent``."""

    model_config = ConfigDict(extra="allow")

    contents: list[GoogleContent] = Field(default_factory=list)


class GoogleAdapter(ProviderAdapter):
    vendor = Vendor.GOOGLE
    request_model = GoogleGenerateContentRequest

    def conversation(  # type: ignore[override]
        self, request: GoogleGenerateContentRequest
    ) -> Sequence[Any]:
        return request.contents

    def normalize_fields(self, message: dict[str, Value]) -> Value:
        parts = message.get("parts")
        if parts is not None and not isinstance(parts, list):
            raise MalformedMatchValue(f"Google content parts must be a list, got {parts!r}")
        return message
