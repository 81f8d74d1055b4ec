"""FastAPI application factory."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.routes.financial import router as financial_router
from core.config import get_settings


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="PV Financing Comparator API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(financial_router)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "healthy", "horizon_years": settings.horizon_years}

    return app


__all__ = ["create_app"]
