from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from student_records.api.v1.router import api_router
from student_records.core.config import settings
from student_records.core.database import Database
from student_records.core.handlers import register_exception_handlers
from student_records.core.logging import logger, setup_logging
from student_records.schemas.student import StatusResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    database: Database = app.state.database
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.APP_VERSION}")
    logger.info(f"Database: {settings.masked_database_url()}")
    # Connect in the background; until then data endpoints answer 503
    database.start()
    yield
    await database.stop()


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application around ``database``. Tests pass their own
    instance; by default one is built from settings.
    """
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    if database is None:
        database = Database.from_settings(settings)
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/", response_model=StatusResponse)
    def root(request: Request):
        """
        Health check endpoint
        """
        return {
            "message": "Student Management API is running!",
            "status": "OK",
            "database": request.app.state.database.state.value,
            "version": settings.APP_VERSION,
        }

    return app
