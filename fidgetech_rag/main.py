"""FastAPI application entrypoint with RAG engine lifecycle management."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fidgetech_rag.config import Settings
from fidgetech_rag.logging_config import setup_logging
from fidgetech_rag.rag import RAGEngine
from fidgetech_rag.routes import health_router, questions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Configuration and corpus errors propagate here so the server never
    # starts serving without the corpus it was configured for.
    if getattr(app.state, "rag", None) is None:
        settings = Settings.from_env()
        setup_logging(settings.log_level)
        app.state.rag = RAGEngine.from_settings(settings)
        await app.state.rag.initialize()
    yield
    logger.info("RAG service shutting down")


async def invalid_request_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Query is required."})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error | path={request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error.", "details": str(exc)},
    )


def create_app(engine: Optional[RAGEngine] = None) -> FastAPI:
    app = FastAPI(title="Fidgetech RAG", lifespan=lifespan)
    if engine is not None:
        app.state.rag = engine

    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    app.add_exception_handler(RequestValidationError, invalid_request_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health_router)
    app.include_router(questions_router)
    return app


app = create_app()


def run() -> None:
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    logger.info(f"Fidgetech AI Backend listening at http://{settings.host}:{settings.port}")
    uvicorn.run("fidgetech_rag.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
