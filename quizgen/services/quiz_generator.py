import asyncio
import logging
from typing import Awaitable, Callable

from ..core.errors import ConfigurationError, GenerationFailedError
from ..schemas.quiz_schemas import QuizIn
from .gemini_client import ModelClient
from .response_parser import parse_quiz

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class QuizGenerator:
    """Calls the model and parses its answer, retrying a bounded number of times."""

    def __init__(
        self,
        client: ModelClient,
        max_attempts: int = 3,
        retry_delay: float = 2.0,
        backoff: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.backoff = backoff
        self._sleep = sleep

    def delay_for(self, attempt: int) -> float:
        return self.retry_delay * (self.backoff ** attempt)

    async def _attempt(self, prompt: str) -> QuizIn:
        raw = await self.client.generate(prompt)
        return parse_quiz(raw)

    async def generate_quiz(self, prompt: str) -> QuizIn:
        last_error: Exception | None = None
        for attempt in range(self.max_attempts):
            if last_error is not None:
                await self._sleep(self.delay_for(attempt - 1))
            try:
                quiz = await self._attempt(prompt)
            except ConfigurationError:
                raise
            except Exception as e:
                logger.warning("Attempt %d/%d failed: %s", attempt + 1, self.max_attempts, e)
                last_error = e
                continue

            logger.info(
                "Generated quiz %r with %d questions (attempt %d)",
                quiz.name, len(quiz.questions), attempt + 1,
            )
            return quiz

        raise GenerationFailedError(
            f"Failed to generate quiz after multiple attempts: {last_error}"
        ) from last_error
