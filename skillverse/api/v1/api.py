"""
API v1 main router
Combines all v1 endpoint routers
"""

from fastapi import APIRouter

from skillverse.api.v1.endpoints import admin, auth, blogs, chats, courses, health, payments, users

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(courses.router, prefix="/courses", tags=["Courses"])
api_router.include_router(payments.router, prefix="/payments", tags=["Payments"])
api_router.include_router(blogs.router, prefix="/blogs", tags=["Blogs"])
api_router.include_router(chats.router, prefix="/chats", tags=["Chats"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(health.router, tags=["System"])
