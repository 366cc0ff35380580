from contextlib import asynccontextmanager

import sentry_sdk
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from podscript.api.main import api_router
from podscript.core.config import settings
from podscript.core.errors import PodscriptError
from podscript.core.log import setup_logging
from podscript.core.services import close_clients
from podscript.models import ErrorResult

load_dotenv()
setup_logging()

if settings.sentry_dsn and settings.environment != "development":
    sentry_sdk.init(
        dsn=str(settings.sentry_dsn),
        environment=settings.environment,
        traces_sample_rate=settings.sentry_traces_sample_rate,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_clients()


app = FastAPI(title="podscript", lifespan=lifespan)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, error: str, details=None) -> JSONResponse:
    content = ErrorResult(error=error, details=details).model_dump()
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


@app.exception_handler(PodscriptError)
async def handle_podscript_error(request: Request, exc: PodscriptError):
    return error_response(exc.status_code, exc.error, exc.details())


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request", exc.errors())


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


app.include_router(api_router)
