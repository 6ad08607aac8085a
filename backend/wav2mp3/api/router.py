from __future__ import annotations

from fastapi import APIRouter

from .routes import convert


api_router = APIRouter()
api_router.include_router(convert.router, tags=["convert"])
