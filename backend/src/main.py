import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from collaboration.interfaces.routes import router as collaboration_router
from collaboration.interfaces.ws_handler import router as ws_router
from comments.interfaces.routes import router as comments_router
from documents.interfaces.routes import router as documents_router
from shared.config import settings
from shared.exceptions import (
    AppError,
    AuthenticationError,
    ConflictError,
    MalformedChangeError,
    NotFoundError,
    VersionNotFoundError,
)
from shared.infrastructure.database import Base, engine
from shared.infrastructure.redis import close_redis_pool
from shared.logging import configure_logging

import comments.infrastructure.models  # noqa: F401
import documents.infrastructure.models  # noqa: F401
import history.infrastructure.models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    if settings.DB_CREATE_ALL:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")
    yield
    await engine.dispose()
    await close_redis_pool()


app = FastAPI(
    title="Collaborative Document Engine",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(documents_router)
app.include_router(comments_router)
app.include_router(collaboration_router)
app.include_router(ws_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(VersionNotFoundError)
async def version_not_found_handler(request, exc: VersionNotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(MalformedChangeError)
async def malformed_change_handler(request, exc: MalformedChangeError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(AuthenticationError)
async def auth_error_handler(request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(AppError)
async def app_error_handler(request, exc: AppError):
    logger.error("Unhandled application error: %s", exc.message)
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.get("/health")
async def health_check():
    return {"status": "ok"}
