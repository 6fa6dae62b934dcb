"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.chats import router as chats_router
from api.v1.routes.customers import router as customers_router
from api.v1.routes.dashboard import router as dashboard_router
from api.v1.routes.feedback import router as feedback_router
from api.v1.routes.notifications import router as notifications_router
from api.v1.routes.orders import router as orders_router
from api.v1.routes.session import router as session_router

router = APIRouter()
router.include_router(notifications_router)
router.include_router(customers_router)
router.include_router(dashboard_router)
router.include_router(orders_router)
router.include_router(chats_router)
router.include_router(feedback_router)
router.include_router(session_router)
