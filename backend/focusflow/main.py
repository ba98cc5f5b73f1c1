"""Main module for the FocusFlow API"""

from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from focusflow.api.routes import (
    auth,
    coach,
    stats,
    subtasks,
    tasks,
    timer,
    timers,
    users,
)
from focusflow.config import settings
from focusflow.core.logging_config import get_logger, setup_logging
from focusflow.core.recorder import DatabaseSessionRecorder, DatabaseSettingsProvider
from focusflow.core.registry import TimerRegistry, TimerTicker
from focusflow.db.database import SessionLocal, engine
from focusflow.db.models import Base

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    Base.metadata.create_all(bind=engine)

    # A single worker keeps recorder writes in transition order
    executor = (
        ThreadPoolExecutor(max_workers=1, thread_name_prefix="timer-recorder")
        if settings.RECORDER_BACKGROUND
        else None
    )
    registry = TimerRegistry(
        DatabaseSettingsProvider(SessionLocal),
        lambda user_id: DatabaseSessionRecorder(SessionLocal, user_id),
        executor=executor,
    )
    app.state.timer_registry = registry

    ticker = TimerTicker(registry)
    if settings.TIMER_TICKER_ENABLED:
        ticker.start()
    logger.info("startup_complete", project=settings.PROJECT_NAME)
    try:
        yield
    finally:
        await ticker.stop()
        if executor is not None:
            executor.shutdown(wait=True)
        logger.info("shutdown_complete")


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix=settings.API_V1_STR)
app.include_router(users.router, prefix=settings.API_V1_STR)
app.include_router(tasks.router, prefix=settings.API_V1_STR)
app.include_router(subtasks.router, prefix=settings.API_V1_STR)
app.include_router(timers.router, prefix=settings.API_V1_STR)
app.include_router(timer.router, prefix=settings.API_V1_STR)
app.include_router(stats.router, prefix=settings.API_V1_STR)
app.include_router(coach.router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Root endpoint"""
    return {"message": "Welcome to the FocusFlow API"}
