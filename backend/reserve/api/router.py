"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from reserve.api.routes import users, deposits, rainy_day, circle, stats

api_router = APIRouter()

# Include all route modules
api_router.include_router(users.router)
api_router.include_router(deposits.router)
api_router.include_router(rainy_day.router)
api_router.include_router(circle.router)
api_router.include_router(stats.router)
