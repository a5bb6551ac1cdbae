from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from core import db
from core.logging_setup import configure_logging
from document_templates import router as templates_router
from document_templates.errors import TemplateError

configure_logging()
logger = logging.getLogger(__name__)


def cors_allow_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", "http://localhost:3000")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow the admin frontend to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TemplateError)
async def template_error_handler(request: Request, exc: TemplateError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("template_error path=%s error=%s", request.url.path, exc.message)
    else:
        logger.info(
            "template_request_rejected path=%s status=%s error=%s",
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(auth_router.router, tags=["auth"])
app.include_router(templates_router.router, tags=["templates"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "fund document template api"}
