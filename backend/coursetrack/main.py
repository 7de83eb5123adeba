"""
Point d'entrée principal de l'API CourseTrack.
Démarrage : uvicorn coursetrack.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import coursetrack.models  # noqa: F401  enregistre tous les modèles dans Base.metadata avant les routers
from coursetrack.config import Settings, settings as default_settings
from coursetrack.database import Base, create_db_engine, create_session_factory
from coursetrack.routers import courses, enrollments, grades, materials, students
from coursetrack.services.catalog_service import seed_majors
from coursetrack.services.file_store import LocalFileStore
from coursetrack.services.material_service import reconcile_materials

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Cycle de vie de l'application : le point d'entrée possède le moteur BDD et le stockage.
    Au démarrage : tables, filières de référence, rapprochement fichiers ↔ supports.
    """
    settings = app.state.settings
    engine = create_db_engine(settings.DATABASE_URL)
    Base.metadata.create_all(engine)

    app.state.session_factory = create_session_factory(engine)
    app.state.file_store = LocalFileStore(settings.UPLOAD_DIR)

    with app.state.session_factory() as db:
        if settings.SEED_MAJORS:
            seed_majors(db)
        reconcile_materials(db, app.state.file_store, grace_seconds=settings.RECONCILE_GRACE_SECONDS)

    logger.info("CourseTrack API démarrée (env=%s)", settings.ENV)
    yield
    engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(
        title="CourseTrack API",
        description="API de gestion des cours, inscriptions, notes et supports d'un département",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings or default_settings

    # CORS : autorise tous les ports localhost en développement (à restreindre en production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[],
        allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
    )

    app.include_router(courses.router)
    app.include_router(students.router)
    app.include_router(enrollments.router)
    app.include_router(grades.router)
    app.include_router(materials.router)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
        passe bien par CORSMiddleware (qui injecte les headers CORS).
        """
        logger.error("Exception non gérée : %s", exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Une erreur interne est survenue."},
        )

    @app.get("/api/health", tags=["Santé"])
    def health_check():
        """Vérifie que l'API est opérationnelle."""
        return {"status": "ok", "service": "CourseTrack API", "version": "0.1.0"}

    return app


app = create_app()
