"""
FastAPI server for the BookBot Relay service.

This module implements the HTTP API endpoints: a health check and a chat
endpoint that relays a message through the mood-aware model fallback
pipeline.
"""

import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from . import __version__
from .config import load_settings
from .logging_setup import configure_logging
from .models import ChatOutcome
from .pipeline import ChatPipeline

logger = structlog.get_logger(__name__)

HEALTH_MARKER = "Server is running ✅"

NO_MESSAGE_ERROR = "No message provided"
EXHAUSTED_ERROR = "AI failed to respond"
SERVER_ERROR = "Server error"


# API Request/Response Schemas
class ErrorBody(BaseModel):
    """Response model for failed requests."""

    error: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_message(request: Request) -> str | None:
    """
    Return the ``message`` field of a JSON body, or None if unusable.

    Only non-empty strings are relayed; truthy non-string values such as
    numbers or booleans are rejected like a missing message.
    """
    body = await request.body()
    try:
        data = json.loads(body) if body else None
    except ValueError:
        return None

    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if not isinstance(message, str) or not message:
        return None
    return message


def create_app(pipeline: ChatPipeline) -> FastAPI:
    """
    Create a FastAPI application with the given chat pipeline.

    Args:
        pipeline: The ChatPipeline instance used to answer messages

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for FastAPI application."""
        yield
        await pipeline.aclose()

    app = FastAPI(
        title="BookBot Relay",
        description="A mood-aware chat relay with model fallback",
        version=__version__,
        lifespan=lifespan,
    )

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        """Health check endpoint."""
        return HEALTH_MARKER

    @app.post(
        "/chat",
        response_model=ChatOutcome,
        responses={400: {"model": ErrorBody}, 500: {"model": ErrorBody}},
    )
    async def chat(request: Request) -> ChatOutcome | JSONResponse:
        """
        Answer a user message.

        The body must be a JSON object with a non-empty ``message`` string.

        Returns:
            The reply and the identifier of the model that produced it
        """
        try:
            message = await _read_message(request)
            if message is None:
                return _error(400, NO_MESSAGE_ERROR)

            outcome = await pipeline.ask(message)
            if outcome is None:
                return _error(500, EXHAUSTED_ERROR)

            return outcome
        except Exception:
            logger.exception("chat.unhandled_error")
            return _error(500, SERVER_ERROR)

    return app


def build_app() -> FastAPI:
    """Application factory used by uvicorn; reads settings from the environment."""
    settings = load_settings()
    configure_logging(settings.log_level)
    return create_app(ChatPipeline.from_settings(settings))


def main(host: str | None = None, port: int | None = None) -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("server.starting", url=f"http://localhost:{bind_port}")

    uvicorn.run(
        "bookbot_relay.server:build_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
