from fastapi import APIRouter

from ._artifacts import router as artifacts_router
from ._health import router as health_router

router = APIRouter(prefix="/api")

router.include_router(health_router)
router.include_router(artifacts_router)
