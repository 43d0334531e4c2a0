"""FastAPI routes package."""

from fidgetech_rag.routes.health import router as health_router
from fidgetech_rag.routes.questions import router as questions_router

__all__ = ["health_router", "questions_router"]
