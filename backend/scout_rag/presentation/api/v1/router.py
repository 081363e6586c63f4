"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from scout_rag.presentation.api.v1.endpoints.health import router as health_router
from scout_rag.presentation.api.v1.endpoints.context import router as context_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(context_router)
