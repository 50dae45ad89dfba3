"""FastAPI entrypoint for chat/route/session/trace endpoints."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from rag_router.agent.chat_agent import RoutedChatAgent, build_agent
from rag_router.config import AppSettings
from rag_router.errors import RouterError
from rag_router.obs.logging import configure_logging
from rag_router.types import IntentMode


class ChatRequest(BaseModel):
    session_id: str = Field(default="default", min_length=1)
    message: str = Field(min_length=1)


class ModeRequest(BaseModel):
    mode: IntentMode


def _agent(request: Request) -> RoutedChatAgent:
    agent = request.app.state.agent
    if agent is None:
        raise HTTPException(status_code=503, detail="Agent is not initialized")
    return agent


def create_app(
    settings: AppSettings | None = None,
    *,
    agent: RoutedChatAgent | None = None,
) -> FastAPI:
    """Build the API app; without an injected agent one is built at startup."""

    settings = settings or AppSettings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = app.state.agent is None
        if owned:
            app.state.agent = build_agent(settings)
        yield
        if owned:
            app.state.agent.close()

    app = FastAPI(title="RAG Router", version="0.1.0", lifespan=lifespan)
    app.state.agent = agent

    @app.get("/health")
    def health(request: Request) -> dict[str, Any]:
        current = request.app.state.agent
        if current is None:
            return {"status": "starting"}
        return {
            "status": "ok",
            "llm_configured": current.llm_configured,
            "retriever_ready": current.dispatcher.retriever.ready,
            "tool_count": len(current.dispatcher.registry),
            "trace_count": len(current.trace_store),
        }

    @app.post("/chat")
    def chat(payload: ChatRequest, request: Request) -> StreamingResponse:
        current = _agent(request)
        return StreamingResponse(
            current.respond(payload.session_id, payload.message),
            media_type="text/plain; charset=utf-8",
        )

    @app.post("/route")
    async def route(payload: ChatRequest, request: Request) -> dict[str, Any]:
        current = _agent(request)
        try:
            decision = await current.route(payload.session_id, payload.message)
        except RouterError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return decision.to_dict()

    @app.get("/sessions/{session_id}")
    def session_detail(session_id: str, request: Request) -> dict[str, Any]:
        session = _agent(request).sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
        return {
            "session_id": session.session_id,
            "mode": session.mode.value,
            "history": [asdict(message) for message in session.history],
        }

    @app.put("/sessions/{session_id}/mode")
    async def session_mode(session_id: str, payload: ModeRequest, request: Request) -> dict[str, Any]:
        await _agent(request).set_mode(session_id, payload.mode)
        return {"session_id": session_id, "mode": payload.mode.value}

    @app.post("/sessions/{session_id}/reset")
    async def session_reset(session_id: str, request: Request) -> dict[str, Any]:
        await _agent(request).reset(session_id)
        return {"session_id": session_id, "cleared": True}

    @app.get("/traces")
    def traces(request: Request, limit: int = 20) -> dict[str, Any]:
        records = [asdict(record) for record in _agent(request).trace_store.list_recent(limit=limit)]
        return {"items": records}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str, request: Request) -> dict[str, Any]:
        try:
            record = _agent(request).trace_store.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics(request: Request) -> dict[str, Any]:
        return _agent(request).trace_store.summary()

    return app


app = create_app()
