"""Shared fixtures: a fake chat-completion API served through httpx.MockTransport."""

import asyncio
import contextlib
import json
import socket
import threading
import time
from collections.abc import Iterator

import httpx
import pytest
import uvicorn

from bookbot_relay.config import Settings
from bookbot_relay.mood import MOOD_INSTRUCTION

API_URL = "https://inference.test/v1/chat/completions"
MOOD_MODEL = "test/mood-model"
REPLY_MODELS = ["test/model-a", "test/model-b", "test/model-c"]


def completion(content: str) -> dict:
    """Body of a successful chat-completion response."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeInferenceAPI:
    """
    Records every request and answers by model.

    ``mood`` is what the classifier call gets back; ``replies`` maps a reply
    model to what it answers. An answer is either a string (success), an int
    (HTTP status with an error body), an httpx.Response, or an exception
    instance to raise.
    """

    def __init__(self) -> None:
        self.mood: object = "neutral"
        self.replies: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    @property
    def mood_calls(self) -> list[dict]:
        return [p for p in self.payloads if _is_mood_call(p)]

    @property
    def reply_calls(self) -> list[dict]:
        return [p for p in self.payloads if not _is_mood_call(p)]

    @property
    def reply_models_called(self) -> list[str]:
        return [p["model"] for p in self.reply_calls]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        payload = json.loads(request.content)
        answer = self.mood if _is_mood_call(payload) else self.replies.get(payload["model"], 503)

        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, httpx.Response):
            return answer
        if isinstance(answer, int):
            return httpx.Response(answer, json={"error": f"status {answer}"})
        return httpx.Response(200, json=completion(answer))


def _is_mood_call(payload: dict) -> bool:
    return payload["messages"][0]["content"] == MOOD_INSTRUCTION


@pytest.fixture
def fake_api() -> FakeInferenceAPI:
    return FakeInferenceAPI()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        hf_token="test-token",
        api_url=API_URL,
        mood_model=MOOD_MODEL,
        reply_models=REPLY_MODELS,
    )


def free_port() -> int:
    """Return a local port that nothing is listening on."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@contextlib.contextmanager
def live_server(app) -> Iterator[str]:
    """Serve the app with uvicorn in a background thread and yield its base URL."""
    host, port = "127.0.0.1", free_port()
    base_url = f"http://{host}:{port}"

    config = uvicorn.Config(
        app=app,
        host=host,
        port=port,
        loop="asyncio",
        lifespan="on",
        log_level="warning",
        ws="none",
    )
    server = uvicorn.Server(config)

    def run_server() -> None:
        asyncio.run(server.serve())

    thread = threading.Thread(target=run_server, daemon=True)
    thread.start()

    # Wait for server to be ready
    start = time.time()
    while time.time() - start < 5.0:
        try:
            r = httpx.get(base_url + "/health", timeout=0.2)
            if r.status_code == 200:
                break
        except Exception:
            pass
        time.sleep(0.05)
    else:
        server.should_exit = True
        thread.join(timeout=1.0)
        assert False, "Server did not start in time"

    try:
        yield base_url
    finally:
        # Shutdown server
        server.should_exit = True
        thread.join(timeout=2.0)
