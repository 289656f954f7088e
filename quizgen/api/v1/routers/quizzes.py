import logging
from fastapi import APIRouter, HTTPException, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile
from typing import Annotated
from supabase import Client
from ....core.auth import CurrentUserId
from ....core.config import Settings, get_settings
from ....core.errors import ExtractionError, describe_error
from ....core.supabase_client import get_supabase
from ....schemas.quiz_schemas import (
    ErrorOut,
    GenerateQuizOut,
    QuizListItem,
    QuizOut,
    SubmissionIn,
    SubmissionOut,
    SubmissionResultOut,
)
from ....services.gemini_client import create_model_client
from ....services.quiz_generator import QuizGenerator
from ....services.quiz_pipeline import QuizPipeline
from ....services.quiz_service import QuizService
from ....repositories.quiz_repository import QuizRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["quizzes"])

# Dependency factories

def get_repository(client: Annotated[Client, Depends(get_supabase)]) -> QuizRepository:
    return QuizRepository(client)

def get_service(repo: Annotated[QuizRepository, Depends(get_repository)]) -> QuizService:
    return QuizService(repo)

def get_pipeline(
    repo: Annotated[QuizRepository, Depends(get_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> QuizPipeline:
    # ConfigurationError for a missing key surfaces here, before any model call
    generator = QuizGenerator(
        create_model_client(settings),
        max_attempts=settings.QUIZ_MAX_ATTEMPTS,
        retry_delay=settings.retry_delay_seconds,
        backoff=settings.QUIZ_RETRY_BACKOFF,
    )
    return QuizPipeline(generator, repo, timeout=settings.QUIZ_GENERATION_TIMEOUT_SECONDS)

ServiceDep = Annotated[QuizService, Depends(get_service)]
PipelineDep = Annotated[QuizPipeline, Depends(get_pipeline)]
SettingsDep = Annotated[Settings, Depends(get_settings)]

@router.post(
    "/generate",
    response_model=GenerateQuizOut,
    responses={500: {"model": ErrorOut}},
)
async def generate_quiz(
    request: Request,
    pipeline: PipelineDep,
    settings: SettingsDep,
    user_id: CurrentUserId,
):
    # form read by hand: a non-file `pdf` must still get the {error} reply
    try:
        form = await request.form()
        pdf = form.get("pdf")
        if not isinstance(pdf, StarletteUploadFile):
            raise ExtractionError("No PDF document provided under the 'pdf' field")
        data = await pdf.read(settings.max_upload_bytes + 1)
        if len(data) > settings.max_upload_bytes:
            raise ExtractionError(f"Document exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB upload limit")

        quiz_id = await pipeline.create_from_pdf(data, user_id)
        return {"quizzId": quiz_id}
    except Exception as e:
        message = describe_error(e)
        logger.error("Error occurred while processing request: %s", message, exc_info=True)
        return JSONResponse({"error": message}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

@router.get("/", response_model=list[QuizListItem])
async def list_quizzes(svc: ServiceDep, user_id: CurrentUserId):
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in to list your quizzes")
    return await run_in_threadpool(svc.list_quizzes, user_id)

@router.get("/{quiz_id}", response_model=QuizOut)
async def get_quiz(quiz_id: int, svc: ServiceDep):
    data = await run_in_threadpool(svc.get_quiz, quiz_id)
    if not data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return data

@router.delete("/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz(quiz_id: int, svc: ServiceDep, user_id: CurrentUserId):
    quiz = await run_in_threadpool(svc.get_quiz_row, quiz_id)
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    # quizzes owned by someone can only be deleted by that user
    if quiz.get("user_id") is not None and quiz["user_id"] != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your quiz")
    await run_in_threadpool(svc.delete_quiz, quiz_id)
    return None

@router.post("/{quiz_id}/submissions", response_model=SubmissionResultOut, status_code=status.HTTP_201_CREATED)
async def submit_quiz(quiz_id: int, payload: SubmissionIn, svc: ServiceDep):
    result = await run_in_threadpool(
        svc.submit_answers, quiz_id, [a.model_dump() for a in payload.answers]
    )
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return result

@router.get("/{quiz_id}/submissions", response_model=list[SubmissionOut])
async def list_submissions(quiz_id: int, svc: ServiceDep):
    if not await run_in_threadpool(svc.quiz_exists, quiz_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return await run_in_threadpool(svc.list_submissions, quiz_id)
