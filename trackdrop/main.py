"""trackdrop - Main application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from trackdrop import __version__
from trackdrop.api.access.services.geo import GeoLocator
from trackdrop.api.analytics.controllers.analytics_controller import router as analytics_router
from trackdrop.api.download.controllers.download_controller import router as download_router
from trackdrop.api.pages.controllers.pages_controller import router as pages_router
from trackdrop.api.uploads.controllers.upload_controller import router as upload_router
from trackdrop.config import (
    DATABASE_URL,
    FILES_DIR,
    GEOIP_DB_PATH,
    LOG_LEVEL,
    MAX_FILE_SIZE,
    TRUST_PROXY_HEADERS,
)
from trackdrop.database import init_db, make_engine, make_session_factory
from trackdrop.dependencies import Services, build_services

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the GeoIP database file on shutdown
    app.state.services.recorder.geo.close()


async def storage_error_handler(request: Request, exc: SQLAlchemyError):
    """A broken database fails the current request only."""
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(
    session_factory: sessionmaker | None = None,
    files_dir: Path | None = None,
    geo: GeoLocator | None = None,
    max_file_size: int = MAX_FILE_SIZE,
    trust_proxy: bool = TRUST_PROXY_HEADERS,
    services: Services | None = None,
) -> FastAPI:
    if services is None:
        if session_factory is None:
            engine = make_engine(DATABASE_URL)
            init_db(engine)
            session_factory = make_session_factory(engine)
        files_dir = files_dir or FILES_DIR
        files_dir.mkdir(parents=True, exist_ok=True)
        services = build_services(
            session_factory=session_factory,
            files_dir=files_dir,
            geo=geo or GeoLocator(GEOIP_DB_PATH),
            max_file_size=max_file_size,
            trust_proxy=trust_proxy,
        )

    app = FastAPI(title="trackdrop", version=__version__, lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    # Router registration order matters:
    # the bundle route must match before the single-file catch-all
    app.include_router(upload_router)
    app.include_router(analytics_router)
    app.include_router(download_router)
    app.include_router(pages_router)

    return app


def run():
    import uvicorn

    uvicorn.run("trackdrop.main:create_app", factory=True, host="0.0.0.0", port=3000)


if __name__ == "__main__":
    run()
