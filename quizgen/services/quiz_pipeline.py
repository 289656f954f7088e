import asyncio
import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from ..core.errors import ExtractionError, GenerationFailedError
from ..repositories.quiz_repository import QuizRepository
from .pdf_extractor import extract_texts
from .prompt_builder import build_prompt
from .quiz_generator import QuizGenerator

logger = logging.getLogger(__name__)


class QuizPipeline:
    """PDF bytes in, stored quiz id out."""

    def __init__(
        self,
        generator: QuizGenerator,
        repo: QuizRepository,
        timeout: Optional[float] = None,
    ) -> None:
        self.generator = generator
        self.repo = repo
        self.timeout = timeout

    async def create_from_pdf(self, data: bytes, user_id: Optional[str] = None) -> int:
        texts = await run_in_threadpool(extract_texts, data)
        if not texts:
            raise ExtractionError("No extractable text found in document")

        prompt = build_prompt(texts)
        try:
            quiz = await asyncio.wait_for(self.generator.generate_quiz(prompt), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise GenerationFailedError(
                f"Failed to generate quiz after multiple attempts: timed out after {self.timeout}s"
            ) from e

        quiz_id = await run_in_threadpool(self.repo.create_quiz, quiz, user_id)
        logger.info("Created quiz %s for user %s", quiz_id, user_id)
        return quiz_id
