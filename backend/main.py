import os
import sys
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.core.config import Settings, settings as default_settings
from portal.core.database import Store
from portal.api.router import api_router
from portal.services.auth import TokenService
from portal.services.storage import create_storage_service


# Logging configuration for container stdout plus a local log file
def setup_logging(settings: Settings = default_settings):
    """Configure root logging once for the process."""
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    try:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(settings.LOG_DIR, 'portal.log'))
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError as e:
        # If we can't create file handler, just log to console
        root_logger.warning(f"Could not create file handler: {e}")

    return logging.getLogger(__name__)


# Set up logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    store: Store = app.state.store
    try:
        await store.open()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        logger.warning("Continuing startup without database initialization")
    if await store.healthcheck():
        logger.info("Database initialized successfully")
    else:
        logger.error("Database is not reachable; requests will fail until it is")
    yield
    # Shutdown
    await store.close()


def _error_envelope(detail) -> dict:
    if isinstance(detail, dict):
        return {"success": False, **detail}
    return {"success": False, "error": detail}


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.error(f"HTTP {exc.status_code} on {request.method} {request.url}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(_error_envelope(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {key: value for key, value in error.items() if key not in ("ctx", "input", "url")}
        for error in exc.errors()
    ]
    first = errors[0] if errors else {"loc": (), "msg": "Invalid request"}
    loc = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = f"{loc}: {first['msg']}" if loc else first["msg"]

    logger.error(f"Validation error on {request.method} {request.url}: {errors}")
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"success": False, "error": message, "details": errors}),
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="Admin Portal API",
        description="Clients, projects, milestones, deliverables and renewals",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = Store(settings)
    app.state.token_service = TokenService(settings)
    app.state.storage = create_storage_service(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin for origin in settings.ALLOWED_HOSTS if origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Add request logging middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Request: {request.method} {request.url}")
        try:
            response = await call_next(request)
            logger.info(f"Response status: {response.status_code}")
            return response
        except Exception as e:
            logger.error(f"Request failed with exception: {str(e)}")
            logger.exception("Full traceback:")
            raise

    app.include_router(api_router, prefix="/api")

    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=upload_dir), name="uploads")

    @app.get("/")
    async def root():
        return {"message": "Admin Portal API", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        if await app.state.store.healthcheck():
            return {"status": "healthy"}
        return JSONResponse(status_code=503, content={"status": "unavailable"})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "5000")),
        reload=default_settings.debug,
        log_level=default_settings.log_level,
    )
