import asyncio

import pytest

from quizgen.core.errors import ConfigurationError, GenerationFailedError, QuizParseError
from quizgen.services.quiz_generator import QuizGenerator

from conftest import GEO_QUIZ_JSON, ScriptedModelClient


@pytest.mark.asyncio
async def test_first_success_returns_without_retry(sleep):
    client = ScriptedModelClient(GEO_QUIZ_JSON, GEO_QUIZ_JSON)
    quiz = await QuizGenerator(client, sleep=sleep).generate_quiz("prompt")

    assert quiz.name == "Geo"
    assert client.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt(sleep):
    client = ScriptedModelClient(
        RuntimeError("503 unavailable"),
        RuntimeError("connection reset"),
        "```json\n" + GEO_QUIZ_JSON + "\n```",
    )
    quiz = await QuizGenerator(client, sleep=sleep).generate_quiz("prompt")

    assert quiz.questions[0].answers[0].answerText == "Paris"
    assert client.calls == 3
    assert sleep.delays == [2.0, 2.0]
    assert client.prompts == ["prompt"] * 3


@pytest.mark.asyncio
async def test_unparseable_output_is_retried(sleep):
    client = ScriptedModelClient("I cannot help with that", GEO_QUIZ_JSON)
    quiz = await QuizGenerator(client, sleep=sleep).generate_quiz("prompt")

    assert quiz.name == "Geo"
    assert client.calls == 2
    assert sleep.delays == [2.0]


@pytest.mark.asyncio
async def test_gives_up_after_three_attempts(sleep):
    client = ScriptedModelClient(
        RuntimeError("first"),
        RuntimeError("second"),
        RuntimeError("third"),
        GEO_QUIZ_JSON,
    )
    with pytest.raises(GenerationFailedError) as exc:
        await QuizGenerator(client, sleep=sleep).generate_quiz("prompt")

    assert "Failed to generate quiz after multiple attempts" in str(exc.value)
    assert "third" in str(exc.value)
    assert isinstance(exc.value.__cause__, RuntimeError)
    assert client.calls == 3
    assert len(sleep.delays) == 2


@pytest.mark.asyncio
async def test_last_parse_error_is_reported(sleep):
    client = ScriptedModelClient(RuntimeError("boom"), "nope", '{"name": 1}')
    with pytest.raises(GenerationFailedError) as exc:
        await QuizGenerator(client, sleep=sleep).generate_quiz("prompt")

    assert isinstance(exc.value.__cause__, QuizParseError)


@pytest.mark.asyncio
async def test_configuration_error_is_not_retried(sleep):
    client = ScriptedModelClient(ConfigurationError("Gemini API key not provided"), GEO_QUIZ_JSON)
    with pytest.raises(ConfigurationError):
        await QuizGenerator(client, sleep=sleep).generate_quiz("prompt")

    assert client.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_backoff_grows_the_delay(sleep):
    client = ScriptedModelClient(RuntimeError("a"), RuntimeError("b"), GEO_QUIZ_JSON)
    generator = QuizGenerator(client, retry_delay=1.0, backoff=2.0, sleep=sleep)
    await generator.generate_quiz("prompt")

    assert sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_custom_attempt_budget(sleep):
    client = ScriptedModelClient(*[RuntimeError(str(i)) for i in range(5)])
    with pytest.raises(GenerationFailedError):
        await QuizGenerator(client, max_attempts=5, sleep=sleep).generate_quiz("prompt")
    assert client.calls == 5


@pytest.mark.asyncio
async def test_cancellation_propagates():
    class SlowClient:
        async def generate(self, prompt):
            await asyncio.sleep(10)

    task = asyncio.ensure_future(QuizGenerator(SlowClient()).generate_quiz("prompt"))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


def test_rejects_zero_attempts():
    with pytest.raises(ValueError):
        QuizGenerator(ScriptedModelClient(), max_attempts=0)
