"""RAG-based question answering endpoint."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fidgetech_rag.errors import EmbeddingError, EmptyIndexError, EmptyQueryError, GenerationError
from fidgetech_rag.rag import RAGEngine
from fidgetech_rag.routes.deps import get_rag_engine
from fidgetech_rag.schemas import AskRequest, AskResponse, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["questions"])

AI_FAILURE_MESSAGE = "Failed to get answer from AI. Please check server logs."


def error_response(status_code: int, error: str, details: str = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/ask",
    response_model=AskResponse,
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def ask(body: AskRequest, rag: RAGEngine = Depends(get_rag_engine)):
    try:
        return await rag.ask(body.query)
    except EmptyQueryError as e:
        return error_response(400, e.message)
    except EmptyIndexError as e:
        return error_response(503, e.message)
    except (EmbeddingError, GenerationError) as e:
        logger.error(f"Error during AI processing | error={e}")
        return error_response(500, AI_FAILURE_MESSAGE, e.message)
