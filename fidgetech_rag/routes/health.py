"""Liveness endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from fidgetech_rag.rag import RAGEngine
from fidgetech_rag.routes.deps import get_rag_engine
from fidgetech_rag.schemas import HealthResponse

router = APIRouter(tags=["health"])

LIVENESS_MESSAGE = "Fidgetech AI Backend is running!"


@router.get("/", response_class=PlainTextResponse)
async def root():
    return LIVENESS_MESSAGE


@router.get("/health", response_model=HealthResponse)
async def health(rag: RAGEngine = Depends(get_rag_engine)):
    return HealthResponse(status="ok", chunks=len(rag.index))
