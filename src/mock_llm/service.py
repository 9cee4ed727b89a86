"""FastAPI application exposing vendor-shaped endpoints backed by canned responses."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from .dispatcher import MockDispatcher
from .models import Vendor

LOGGER = logging.getLogger(__name__)

SUPPORTED_ENDPOINTS_HINT = (
    "Supported: /v1/chat/completions (OpenAI), /v1/messages (Anthropic), "
    "/v1beta/models/{model}:generateContent (Google)"
)


class MockLLMApplication:
    def __init__(self, dispatcher: MockDispatcher) -> None:
        self._dispatcher = dispatcher

    def create_app(self) -> FastAPI:
        app = FastAPI(title="Mock LLM Server")
        router = APIRouter()

        @router.get("/health")
        def health() -> Dict[str, Any]:
            return {"status": "healthy", "service": "mock-llm", **self._dispatcher.counts()}

        @router.post("/v1/chat/completions")
        async def openai_chat_completions(request: Request) -> JSONResponse:
            return await self._respond(Vendor.OPENAI, request)

        @router.post("/v1/messages")
        async def anthropic_messages(request: Request) -> JSONResponse:
            if not request.headers.get("x-api-key"):
                raise HTTPException(status_code=401, detail="Missing x-api-key header")
            if not request.headers.get("anthropic-version"):
                raise HTTPException(status_code=400, detail="Missing anthropic-version header")
            return await self._respond(Vendor.ANTHROPIC, request)

        @router.post("/v1beta/models/{model}:generateContent")
        async def google_generate_content(request: Request, model: str) -> JSONResponse:
            LOGGER.debug("Google generateContent request for model %s", model)
            return await self._respond(Vendor.GOOGLE, request)

        @router.api_route(
            "/{path:path}",
            methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            include_in_schema=False,
        )
        def not_found(request: Request, path: str) -> JSONResponse:
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint not found",
                    "path": request.url.path,
                    "method": request.method,
                    "hint": SUPPORTED_ENDPOINTS_HINT,
                },
            )

        app.include_router(router)
        return app

    async def _respond(self, vendor: Vendor, request: Request) -> JSONResponse:
        conversation = await self._decode(vendor, request)
        entry = self._dispatcher.match_request(vendor, conversation)
        if entry is None:
            LOGGER.info("No %s mock matched the request", vendor.value)
            raise HTTPException(status_code=404, detail="No matching mock found")
        LOGGER.debug("Serving %s mock %r", vendor.value, entry.name)
        return JSONResponse(status_code=200, content=entry.response)

    async def _decode(self, vendor: Vendor, request: Request) -> BaseModel:
        body = await request.body()
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {exc}") from exc
        try:
            return self._dispatcher.adapter(vendor).decode_request(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid JSON: {exc}") from exc


def create_app(dispatcher: MockDispatcher) -> FastAPI:
    return MockLLMApplication(dispatcher).create_app()
