"""FastAPI API endpoints under /api.

Endpoint groups: health + export/import, jokes (with versions and
performances), routines (with ordering and routine-level AI), premises,
structures, and the per-task AI endpoint. Data routes are scoped to the
owner named by the X-User-Id header.
"""

from fastapi import APIRouter

from .ai import router as ai_router
from .jokes import router as jokes_router
from .premises import router as premises_router
from .routines import router as routines_router
from .settings import router as settings_router
from .structures import router as structures_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(jokes_router)
router.include_router(routines_router)
router.include_router(premises_router)
router.include_router(structures_router)
router.include_router(ai_router)
