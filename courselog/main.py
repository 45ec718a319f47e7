import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from courselog.auth import router as auth_router
from courselog.core import config, db
from courselog.core.errors import AppError
from courselog.courses import router as courses_router
from courselog.profiles import router as profiles_router
from courselog.reviews import router as reviews_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config.configure_logging()
    # One store per process; requests borrow it through get_store.
    app.state.store = await db.open_store()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="courselog api", lifespan=lifespan)

# Allow the frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router, tags=["auth"])
app.include_router(profiles_router.router, tags=["profiles"])
app.include_router(courses_router.router, tags=["courses"])
app.include_router(courses_router.me_router, tags=["courses"])
app.include_router(reviews_router.router, tags=["reviews"])


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.error(
        "request_failed path=%s error=%s detail=%s",
        request.url.path,
        type(exc).__name__,
        exc,
    )
    return JSONResponse(status_code=exc.http_status, content={"error": exc.public_message})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "courselog api"}
