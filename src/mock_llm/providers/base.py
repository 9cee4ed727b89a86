"""Base classes for vendor-specific provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Sequence

from pydantic import BaseModel

from ..matching.normalize import drop_nulls, to_value
from ..models import Value, Vendor


class ProviderAdapter(ABC):
    """Translate a vendor's native shapes into canonical value trees.

    Adapters never decide whether something matches; they only pull the tail
    message out of a request and normalise stored match payloads so both sides
    can be handed to the structural matcher.
    """

    vendor: ClassVar[Vendor]
    request_model: ClassVar[type[BaseModel]]

    def decode_request(self, payload: Any) -> BaseModel:
        """Validate a decoded JSON body against the vendor request schema."""

        return self.request_model.model_validate(payload)

    def extract_tail_message(self, request: BaseModel) -> tuple[Value, bool]:
        """Return the canonical last turn and whether the conversation had one.

        Null members are dropped, the way the vendor SDKs omit unset fields.
        """

        messages = self.conversation(request)
        if not messages:
            return None, False
        return self.normalize_message(drop_nulls(to_value(messages[-1]))), True

    def extract_expected_value(self, match: Any) -> Value:
        """Return the canonical form of a stored match payload.

        Nulls are kept: an expected null only matches an actual null.
        Raises :class:`MalformedMatchValue` when the payload cannot be
        normalised.
        """

        return self.normalize_message(to_value(match))

    def normalize_message(self, value: Value) -> Value:
        if isinstance(value, dict):
            return self.normalize_fields(value)
        return value

    @abstractmethod
    def conversation(self, request: BaseModel) -> Sequence[Any]:
        """Return the ordered turns of a decoded request."""

    def normalize_fields(self, message: dict[str, Value]) -> Value:
        """Apply vendor-specific rewriting to an object-shaped message."""

        return message
