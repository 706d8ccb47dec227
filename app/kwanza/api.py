from fastapi import APIRouter

from app.kwanza.routers.auth import router as auth_router
from app.kwanza.routers.catalog import router as catalog_router
from app.kwanza.routers.health import router as health_router
from app.kwanza.routers.metrics import router as metrics_router
from app.kwanza.routers.parties import router as parties_router
from app.kwanza.routers.reports import router as reports_router
from app.kwanza.routers.sales import router as sales_router
from app.kwanza.routers.users import router as users_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router, prefix="/api/auth", tags=["auth"])
api_router.include_router(users_router, tags=["users"])
api_router.include_router(catalog_router, tags=["catalog"])
api_router.include_router(parties_router, tags=["parties"])
api_router.include_router(sales_router, tags=["sales"])
api_router.include_router(reports_router, tags=["reports"])
api_router.include_router(metrics_router, tags=["ops"])
