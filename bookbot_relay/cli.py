"""
Command-line interface tools for the BookBot Relay service.
"""

import asyncio
import json
from collections.abc import Coroutine
from typing import Any

import httpx
import typer

from .config import load_settings
from .errors import ConfigError
from .logging_setup import configure_logging
from .pipeline import ChatPipeline

DEFAULT_BASE_URL = "http://localhost:3000"

app = typer.Typer(help="BookBot Relay CLI tools")


# MARK: - Commands


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind to"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on"),
) -> None:
    """Run the relay server."""
    from .server import main

    try:
        main(host=host, port=port)
    except ConfigError as e:
        print(f"Error: {e}")
        raise typer.Exit(1)


@app.command()
def ask(
    message: str = typer.Argument(..., help="Message to send to the models"),
) -> None:
    """Run one message through the pipeline locally, without a server."""
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Error: {e}")
        raise typer.Exit(1)
    configure_logging(settings.log_level)

    async def _ask() -> None:
        pipeline = ChatPipeline.from_settings(settings)
        try:
            outcome = await pipeline.ask(message)
        finally:
            await pipeline.aclose()

        if outcome is None:
            print("All models failed. Check your token or internet connection.")
            raise typer.Exit(1)

        print(f"Model: {outcome.model_used}")
        print("-" * 50)
        print(outcome.reply)

    asyncio.run(_ask())


@app.command()
def send(
    message: str = typer.Argument(..., help="Message to send to the relay"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the BookBot relay"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Send a chat message to a running relay."""

    async def _send() -> None:
        async with httpx.AsyncClient(timeout=None) as client:
            response = await client.post(f"{base_url}/chat", json={"message": message})
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2))
                return

            print(f"[{result['modelUsed']}] {result['reply']}")

    _run_with_error_handling(_send(), base_url)


@app.command()
def health(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the BookBot relay"
    ),
) -> None:
    """Check that a relay is up."""

    async def _health() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/health")
            response.raise_for_status()
            print(response.text)

    _run_with_error_handling(_health(), base_url)


# MARK: - Private Helpers


def _describe_http_error(error: httpx.HTTPStatusError) -> str:
    """Format an HTTP error, including the relay's error message when present."""
    status = error.response.status_code
    try:
        detail = error.response.json().get("error")
    except (ValueError, AttributeError):
        detail = None
    return f"HTTP {status}: {detail}" if detail else f"HTTP {status}"


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: {_describe_http_error(e)}")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
