from __future__ import annotations

from fastapi import FastAPI

from .api.router import api_router
from .core.config import settings
from .core.logging import configure_logging


configure_logging()

app = FastAPI(title=settings.app_name)
app.include_router(api_router, prefix="/api")
