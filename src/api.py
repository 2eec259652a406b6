"""
REST API for the order support assistant.

Run: uvicorn src.api:app --host 0.0.0.0 --port 4000

    POST /chat    {"message": "...", "session": "web-42"} -> {"reply": "..."}
    GET  /health  -> {"status": "ok", "sessions": <count>}

Business failures never produce an error status: the dialogue engine
always answers with a reply string. Only a malformed request body is
rejected by request validation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.config import AppConfig, settings
from src.conversation.dialogue_engine import DialogueEngine
from src.conversation.session_store import SessionStore
from src.schemas.conversation_schema import ChatRequest, ChatResponse
from src.tools.gateway import HttpBackendGateway
from src.tools.mock_backend import InMemoryBackend

logger = logging.getLogger(__name__)


def build_engine(config: AppConfig = settings) -> DialogueEngine:
    """Wire a dialogue engine to the backend selected by ``BACKEND_MODE``."""
    if config.backend.mode == "memory":
        backend = InMemoryBackend.with_sample_data()
    else:
        backend = HttpBackendGateway(
            base_url=config.backend.base_url,
            timeout_sec=config.backend.timeout_sec,
        )
    logger.info("Backend mode: %s", config.backend.mode)
    return DialogueEngine(
        backend=backend,
        sessions=SessionStore(idle_ttl_sec=config.sessions.idle_ttl_sec),
        policy=config.dialogue,
        timeout_sec=config.backend.timeout_sec,
    )


def create_app(engine: Optional[DialogueEngine] = None) -> FastAPI:
    """Build the FastAPI application. Pass ``engine`` to inject a prebuilt one."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.engine = engine or build_engine()
        try:
            yield
        finally:
            close = getattr(app.state.engine.backend, "close", None)
            if close is not None:
                await close()

    app = FastAPI(title=settings.business.name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/chat", response_model=ChatResponse)
    async def chat(payload: ChatRequest, request: Request) -> ChatResponse:
        reply = await request.app.state.engine.handle_message(payload.message, payload.session)
        return ChatResponse(reply=reply)

    @app.get("/health")
    async def health(request: Request) -> dict:
        return {"status": "ok", "sessions": len(request.app.state.engine.sessions)}

    return app


app = create_app()
