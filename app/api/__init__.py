"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from app.api.attributes import router as attributes_router
from app.api.categories import router as categories_router
from app.api.health import router as health_router
from app.api.poms import router as poms_router
from app.api.skus import router as skus_router
from app.api.vocabularies import router as vocabularies_router

__all__ = [
    "attributes_router",
    "categories_router",
    "health_router",
    "poms_router",
    "skus_router",
    "vocabularies_router",
]
