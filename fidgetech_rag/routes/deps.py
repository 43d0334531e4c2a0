"""Shared route dependencies."""

from fastapi import Request

from fidgetech_rag.rag import RAGEngine


def get_rag_engine(request: Request) -> RAGEngine:
    return request.app.state.rag
