import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from .core.config import get_settings
from .core.cors import setup_cors
from .core.errors import QuizGenError, describe_error
from .api.v1.routers import quizzes as quizzes_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
for _noisy in ("httpx", "httpcore", "hpack"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)
setup_cors(app, settings)

app.include_router(quizzes_router.router, prefix=settings.API_V1_PREFIX)


@app.exception_handler(QuizGenError)
async def quizgen_error_handler(request: Request, exc: QuizGenError) -> JSONResponse:
    # covers errors raised while resolving dependencies, e.g. a missing API key
    message = describe_error(exc)
    logger.error("%s %s failed: %s", request.method, request.url.path, message)
    return JSONResponse({"error": message}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    uvicorn.run("quizgen.main:app", host="0.0.0.0", port=settings.BACKEND_PORT)
