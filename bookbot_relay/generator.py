"""
Reply generation with ordered model fallback.

Candidate models are tried one at a time in priority order. Each attempt is
recorded as an AttemptResult; the first success becomes the outcome and no
later candidate is called.
"""

from collections.abc import Sequence

import structlog

from .errors import InferenceError
from .inference import InferenceClient
from .models import AttemptResult, ChatMessage, ChatOutcome, GenerationReport, Mood

logger = structlog.get_logger(__name__)

REPLY_TEMPERATURE = 0.7
REPLY_MAX_TOKENS = 150

_TONE_RULES = {
    Mood.HAPPY.value: "Match their good mood. Be warm and upbeat.",
    Mood.NEUTRAL.value: "Be friendly and to the point.",
    Mood.CONFUSED.value: (
        "Explain things simply and step by step. Offer to clarify anything unclear."
    ),
    Mood.FRUSTRATED.value: (
        "Stay calm and patient. Acknowledge the problem briefly, apologize once "
        "if appropriate and focus on a concrete way to help."
    ),
}


def build_system_prompt(mood: str) -> str:
    """Build the assistant instruction for a user in the given mood."""
    tone = _TONE_RULES.get(mood, _TONE_RULES[Mood.NEUTRAL.value])
    return (
        "You are a friendly human bookstore assistant. Reply naturally, "
        "in a few short sentences.\n"
        f"The customer seems {mood}. {tone}\n"
        "Never mention that you detected their mood."
    )


def build_messages(text: str, mood: str) -> list[ChatMessage]:
    """Build the system and user turns sent to each candidate model."""
    return [
        ChatMessage(role="system", content=build_system_prompt(mood)),
        ChatMessage(role="user", content=text),
    ]


class ResponseGenerator:
    """Walks an ordered list of candidate models until one replies."""

    def __init__(self, client: InferenceClient, models: Sequence[str]) -> None:
        if not models:
            raise ValueError("ResponseGenerator needs at least one candidate model")
        self._client = client
        self.models = list(models)

    async def generate(self, text: str, mood: str) -> ChatOutcome | None:
        """
        Produce a reply from the first candidate model that answers.

        Args:
            text: User message
            mood: Mood label used to steer the tone

        Returns:
            The outcome of the first successful attempt, or None if all failed
        """
        report = await self.run(text, mood)
        return report.outcome

    async def run(self, text: str, mood: str) -> GenerationReport:
        """Run the fallback loop and return every attempt made."""
        messages = build_messages(text, mood)
        report = GenerationReport()

        for model in self.models:
            attempt = await self._attempt(model, messages)
            report.attempts.append(attempt)
            if attempt.ok:
                report.outcome = ChatOutcome(model_used=model, reply=attempt.reply)
                break

        if report.exhausted:
            logger.error("generate.exhausted", attempts=len(report.attempts))
        return report

    async def _attempt(self, model: str, messages: list[ChatMessage]) -> AttemptResult:
        logger.info("generate.attempt", model=model)
        try:
            reply = await self._client.complete(
                model,
                messages,
                max_tokens=REPLY_MAX_TOKENS,
                temperature=REPLY_TEMPERATURE,
            )
        except InferenceError as e:
            logger.warning(
                "generate.attempt_failed",
                model=model,
                status=e.status_code,
                reason=e.reason,
            )
            return AttemptResult(
                model=model, ok=False, status_code=e.status_code, reason=e.reason
            )

        logger.info("generate.attempt_ok", model=model)
        return AttemptResult(model=model, ok=True, reply=reply)
