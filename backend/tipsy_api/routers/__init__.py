"""
API routers, all mounted under ``/api``.

- public: health checks
- tips, reviews: public writes plus role scoped listings
- restaurants, staff: owner management
- workers: public worker pages and the worker profile resource
- users, notifications: the caller's own account
- features: admin feature flags
- payments: payment link stubs
"""

from fastapi import APIRouter

from .features import router as features_router
from .notifications import router as notifications_router
from .payments import router as payments_router
from .public import health_router
from .restaurants import router as restaurants_router
from .reviews import router as reviews_router
from .staff import router as staff_router
from .tips import router as tips_router
from .users import router as users_router
from .workers import router as workers_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(tips_router)
api_router.include_router(reviews_router)
api_router.include_router(restaurants_router)
api_router.include_router(staff_router)
api_router.include_router(workers_router)
api_router.include_router(users_router)
api_router.include_router(notifications_router)
api_router.include_router(features_router)
api_router.include_router(payments_router)

__all__ = ["api_router"]
