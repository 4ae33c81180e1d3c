"""
Client for the hosted chat-completion API.

Each call posts ``{model, messages, max_tokens, temperature}`` with a bearer
token and returns the content of the first choice. Anything other than a
well-formed successful reply is raised as an InferenceError.
"""

from collections.abc import Sequence

import httpx

from .errors import InferenceError
from .models import ChatMessage

# Upstream error bodies can be large HTML pages
_ERROR_BODY_LIMIT = 200


class InferenceClient:
    """Thin async wrapper around the chat-completion endpoint."""

    def __init__(
        self,
        api_url: str,
        token: str,
        timeout: float | None = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
        )

    async def __aenter__(self) -> "InferenceClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def complete(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        max_tokens: int,
        temperature: float,
    ) -> str:
        """
        Request one completion from the given model.

        Args:
            model: Identifier of the hosted model
            messages: Ordered chat turns
            max_tokens: Output length cap
            temperature: Sampling temperature

        Returns:
            The content of the first returned choice

        Raises:
            InferenceError: On transport errors, non-2xx statuses or malformed bodies
        """
        payload = {
            "model": model,
            "messages": [message.model_dump() for message in messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            response = await self._client.post(self.api_url, json=payload)
        except httpx.TimeoutException:
            raise InferenceError(model, "request timed out")
        except httpx.HTTPError as e:
            reason = str(e) or type(e).__name__
            raise InferenceError(model, f"transport error: {reason}")

        if response.is_error:
            body = response.text[:_ERROR_BODY_LIMIT]
            raise InferenceError(
                model, f"HTTP {response.status_code}: {body}", response.status_code
            )

        return _extract_content(model, response)


def _extract_content(model: str, response: httpx.Response) -> str:
    """Pull ``choices[0].message.content`` out of a successful response."""
    try:
        data = response.json()
    except ValueError:
        raise InferenceError(model, "response body is not JSON", response.status_code)

    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices:
        raise InferenceError(model, "response has no choices", response.status_code)

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise InferenceError(
            model, "response choice has no message content", response.status_code
        )
    return content
