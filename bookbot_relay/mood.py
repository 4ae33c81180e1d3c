"""
Mood classification for incoming chat messages.

A single cheap model is asked for one word describing the user's tone. The
classifier never fails: any problem collapses to the neutral mood.
"""

import structlog

from .inference import InferenceClient
from .models import DEFAULT_MOOD, ChatMessage, Mood

logger = structlog.get_logger(__name__)

MOOD_TEMPERATURE = 0.1
MOOD_MAX_TOKENS = 5

_MOOD_WORDS = ", ".join(mood.value for mood in Mood)

MOOD_INSTRUCTION = (
    "Classify the emotional tone of the user's message. "
    f"Answer with exactly one lowercase word from this list: {_MOOD_WORDS}. "
    "Do not add punctuation or any other text."
)


class MoodClassifier:
    """
    Classifies the tone of a message with one call to one model.

    With ``strict`` enabled (the default) any answer outside the Mood
    enumeration is clamped to neutral before it can reach a prompt. With
    ``strict`` disabled the normalized answer is passed through verbatim.
    """

    def __init__(self, client: InferenceClient, model: str, strict: bool = True) -> None:
        self._client = client
        self.model = model
        self.strict = strict

    async def classify(self, text: str) -> str:
        """
        Classify the mood of the given text.

        Args:
            text: Non-empty user message

        Returns:
            A mood label, ``neutral`` if classification failed
        """
        messages = [
            ChatMessage(role="system", content=MOOD_INSTRUCTION),
            ChatMessage(role="user", content=text),
        ]

        try:
            raw = await self._client.complete(
                self.model,
                messages,
                max_tokens=MOOD_MAX_TOKENS,
                temperature=MOOD_TEMPERATURE,
            )
        except Exception as e:
            logger.warning("mood.failed", model=self.model, error=str(e))
            return DEFAULT_MOOD.value

        label = raw.strip().lower()
        mood = Mood.parse(label)
        if mood is None and self.strict:
            logger.info("mood.unrecognized", model=self.model, label=label)
            return DEFAULT_MOOD.value

        logger.info("mood.detected", model=self.model, mood=label)
        return label
