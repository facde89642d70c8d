import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from fastapi.middleware.cors import CORSMiddleware
from tutorcenter.core.config import settings
from tutorcenter.core.database import SessionLocal
from tutorcenter.core.logging_config import configure_logging
from tutorcenter.routes.auth.auth_routers import auth_router
from tutorcenter.routes.user.user_routers import user_router
from tutorcenter.routes.group.group_routers import group_router
from tutorcenter.routes.quiz.quiz_routers import quiz_router
from tutorcenter.routes.quiz.attempt_routers import attempt_router
from tutorcenter.services.quiz_attempt import AttemptRegistry, run_ticker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ticker = asyncio.create_task(
        run_ticker(app.state.attempts, app.state.session_factory, settings.TIMER_TICK_SECONDS)
    )
    try:
        yield
    finally:
        ticker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await ticker
        app.state.attempts.clear()
        logger.info("Quiz timer stopped")


def create_app(session_factory=SessionLocal) -> FastAPI:
    configure_logging()

    app = FastAPI(title="Tutoring Center API", lifespan=lifespan)
    app.state.attempts = AttemptRegistry()
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(group_router)
    app.include_router(quiz_router)
    app.include_router(attempt_router)

    @app.get("/", response_class=HTMLResponse)
    async def read_root():
        return """
        <html>
            <head>
                <title>Tutoring Center</title>
            </head>
            <body>
                <h1>Tutoring Center API</h1>
                <p>See the API documentation <a href="/docs">here</a>.</p>
            </body>
        </html>
        """

    return app


app = create_app()
