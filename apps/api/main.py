# apps/api/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.errors import register_error_handlers
from apps.api.routers import admin, applications, auth, companies, documents
from core.config import settings
from core.logging import configure_logging
from services import factory
from services.auth.identity import seed_admin
from services.persistence.schema import ensure_schema

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    if settings.RECORD_STORE == "postgres":
        ensure_schema(settings.DATABASE_URL)
    seed_admin(factory.get_identity_provider(), settings.ADMIN_EMAIL, settings.ADMIN_PWD_HASH)
    logger.info("intake api started (record store: %s)", settings.RECORD_STORE)
    yield


def create_app(*, lifespan_handler=lifespan) -> FastAPI:
    app = FastAPI(title="Company Intake API", version="0.1.0", lifespan=lifespan_handler)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(applications.router)
    app.include_router(companies.router)
    app.include_router(documents.router)
    app.include_router(auth.router)
    app.include_router(admin.router)
    return app


app = create_app()
