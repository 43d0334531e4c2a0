"""Request and response bodies for the HTTP API."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    # Left loose so a missing or non-string query is reported as a 400 by the route.
    query: Optional[Any] = None


class AskResponse(BaseModel):
    answer: str
    retrieved_chunks: List[str] = Field(default_factory=list)
    source_titles: List[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    chunks: int
