# antiresume/main.py

from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from antiresume.database import engine
from antiresume.sweeper import CacheSweeper
from antiresume.routers import profiles, resume
from antiresume.config import CACHE_SWEEP_INTERVAL_SECONDS
from antiresume.services.cache_factory import get_cache
from antiresume.services.errors import (
    BackendError,
    InvalidInputError,
    ProfileNotFoundError,
    ResumeExistsError,
    ResumeNotFoundError,
    UsernameTakenError,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

cache_sweeper = CacheSweeper(CACHE_SWEEP_INTERVAL_SECONDS)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: build the process-wide cache and start the expiry sweeper
    get_cache()
    await cache_sweeper.start()
    try:
        yield
    finally:
        # Shutdown: stop sweeper
        await cache_sweeper.stop()

app = FastAPI(lifespan=lifespan)
app.include_router(profiles.router)
app.include_router(resume.router)


_DOMAIN_ERRORS = {
    ProfileNotFoundError: (404, "User profile not found. Please create a username first."),
    UsernameTakenError: (409, "Username already taken"),
    ResumeExistsError: (409, "Resume already exists. Use PUT to update."),
    ResumeNotFoundError: (404, "Resume not found. Use POST to create."),
}


async def _domain_error_handler(request: Request, exc: Exception):
    status_code, detail = _DOMAIN_ERRORS[type(exc)]
    return JSONResponse(status_code=status_code, content={"detail": detail})


for _exc_type in _DOMAIN_ERRORS:
    app.add_exception_handler(_exc_type, _domain_error_handler)


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    logger.error("Backend failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
def health_check():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ok", "db": "connected"}
    except SQLAlchemyError as e:
        return {"status": "error", "db": str(e)}
