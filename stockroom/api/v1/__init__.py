"""API v1 routes."""

from fastapi import APIRouter

from stockroom.api.v1 import articles, auth, health, stock

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(articles.router, prefix="/articles", tags=["articles"])
router.include_router(stock.router, prefix="/stock", tags=["stock"])
