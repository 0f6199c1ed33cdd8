from fastapi import APIRouter
from crackgrid.api.v1.endpoints import filters, placements, documents, exports, contribute

api_router = APIRouter(prefix="/api/v1")

# Include all endpoint routers
api_router.include_router(filters.router)
api_router.include_router(placements.router)
api_router.include_router(documents.router)
api_router.include_router(exports.router)
api_router.include_router(contribute.router)
