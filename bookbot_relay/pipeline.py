"""
The per-request chat pipeline: classify the mood, then generate a reply.
"""

import httpx
import structlog

from .config import Settings
from .generator import ResponseGenerator
from .inference import InferenceClient
from .models import ChatOutcome
from .mood import MoodClassifier

logger = structlog.get_logger(__name__)


class ChatPipeline:
    """Runs one message through the mood classifier and the reply generator."""

    def __init__(
        self,
        classifier: MoodClassifier,
        generator: ResponseGenerator,
        client: InferenceClient | None = None,
    ) -> None:
        self.classifier = classifier
        self.generator = generator
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ChatPipeline":
        """
        Wire a pipeline whose components share one inference client.

        Args:
            settings: Service configuration
            transport: Optional httpx transport, used by tests to fake the API

        Returns:
            A ready ChatPipeline that owns its client
        """
        client = InferenceClient(
            settings.api_url,
            settings.hf_token,
            timeout=settings.request_timeout,
            transport=transport,
        )
        return cls(
            classifier=MoodClassifier(client, settings.mood_model),
            generator=ResponseGenerator(client, settings.reply_models),
            client=client,
        )

    async def ask(self, text: str) -> ChatOutcome | None:
        """Return the reply for a message, or None if every model failed."""
        mood = await self.classifier.classify(text)
        outcome = await self.generator.generate(text, mood)
        if outcome is not None:
            logger.info("pipeline.done", mood=mood, model=outcome.model_used)
        return outcome

    async def aclose(self) -> None:
        """Close the inference client if this pipeline owns one."""
        if self._client is not None:
            await self._client.aclose()
