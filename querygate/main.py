import logging
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from querygate.core.config import Settings, settings as default_settings
from querygate.core.security import build_record_cipher
from querygate.api.db.database import instantiate_db
from querygate.api.db.session import build_engine, build_session_factory
from querygate.api.routes import database_routes, profile_routes
from querygate.api.services.persisted_state import PersistedRecordRepository
from querygate.api.services.profile_store import ProfileStore
from querygate.engine.query_factory import QueryExecutorFactory


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Open the state database, load profiles and register executors."""
    settings = application.state.settings

    engine = build_engine(settings.DATABASE_URL)
    instantiate_db(engine)

    cipher = build_record_cipher(settings.PROFILE_ENCRYPTION_KEY)
    if cipher is None:
        logger.warning("PROFILE_ENCRYPTION_KEY not set; connection profiles are stored unencrypted")

    repository = PersistedRecordRepository(
        build_session_factory(engine),
        max_age=timedelta(days=settings.PROFILE_RECORD_MAX_AGE_DAYS),
        cipher=cipher
    )
    store = ProfileStore(repository)
    store.load()

    application.state.profile_store = store
    application.state.executor_factory = QueryExecutorFactory(
        connect_timeout_seconds=settings.CONNECT_TIMEOUT_SECONDS,
        mongo_result_limit=settings.MONGO_RESULT_LIMIT
    )
    logger.info(f"{settings.PROJECT_NAME} started")

    yield

    engine.dispose()
    logger.info(f"{settings.PROJECT_NAME} stopped")


def create_application(settings: Settings = None) -> FastAPI:
    """Create FastAPI application."""
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    application = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.PROJECT_DESCRIPTION,
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.settings = settings

    # Set up CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    application.include_router(database_routes.router, prefix=settings.API_PREFIX)
    application.include_router(profile_routes.router, prefix=settings.API_PREFIX)

    @application.get("/")
    def root():
        """Root endpoint."""
        return {"message": "Welcome to querygate!"}

    @application.get("/health")
    def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "querygate",
            "version": settings.VERSION
        }

    return application


app = create_application()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("querygate.main:app", host="0.0.0.0", port=8000, reload=True)
