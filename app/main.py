from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.kwanza.api import api_router
from app.kwanza.core.config import Settings
from app.kwanza.core.errors import setup_exception_handlers
from app.kwanza.core.logging import configure_logging
from app.kwanza.core.metrics import Metrics
from app.kwanza.db.session import Database
from app.kwanza.middleware.observability import ObservabilityMiddleware
from app.kwanza.middleware.trace import TraceIdMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    app.state.database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.metrics = Metrics(enabled=settings.METRICS_ENABLED)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
