import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tight_five.assistant import Assistant
from tight_five.config import Settings, load_settings
from tight_five.errors import ERROR_MESSAGES, DecodeError, OffTopicError, RateLimitedError
from tight_five.llm import LLM, HttpLLM, LLMError
from tight_five.prompts import PromptError
from tight_five.ratelimit import RateLimiter
from tight_five.routes import router
from tight_five.storage import Storage

logger = logging.getLogger(__name__)


def _build_llm(settings: Settings) -> LLM:
    return HttpLLM(
        provider_url=settings.llm_provider_url,
        api_key=settings.llm_api_key,
        provider_format=settings.llm_provider_format,
        model=settings.llm_model,
        timeout=settings.llm_timeout,
    )


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OffTopicError)
    async def off_topic(request: Request, exc: OffTopicError):
        return JSONResponse(status_code=400, content={"detail": ERROR_MESSAGES["OFF_TOPIC"]})

    @app.exception_handler(PromptError)
    async def prompt_error(request: Request, exc: PromptError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        errors = exc.errors(include_url=False, include_context=False)
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})

    @app.exception_handler(RateLimitedError)
    async def rate_limited(request: Request, exc: RateLimitedError):
        return JSONResponse(status_code=429, content={"detail": ERROR_MESSAGES["RATE_LIMIT"]})

    @app.exception_handler(DecodeError)
    @app.exception_handler(LLMError)
    async def upstream_error(request: Request, exc: Exception):
        # Details stay in the log; clients get the generic message.
        logger.error("AI request to %s failed: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"detail": ERROR_MESSAGES["API_ERROR"]})


def create_app(settings: Settings | None = None, llm: LLM | None = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="Tight Five")
    app.state.settings = settings
    app.state.storage = Storage(settings.data_dir)
    app.state.rate_limiter = RateLimiter(settings.rate_limit_max, settings.rate_limit_window)
    app.state.assistant = Assistant(llm or _build_llm(settings), timeout=settings.llm_timeout)

    _install_error_handlers(app)
    app.include_router(router, prefix="/api")
    return app
