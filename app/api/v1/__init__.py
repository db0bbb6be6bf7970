# app/api/v1/__init__.py
from fastapi import APIRouter
from .shift_template_router import shift_template_router
from .permission_router import permission_router
from .user_router import user_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(shift_template_router)
api_v1_router.include_router(permission_router)
api_v1_router.include_router(user_router)

__all__ = [
    "api_v1_router",
    "shift_template_router",
    "permission_router",
    "user_router",
]
