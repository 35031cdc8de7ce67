import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from teamup.auth.firebase_app import init_firebase_app
from teamup.auth.verifier import build_verifier
from teamup.config import settings
from teamup.db.mongo import create_mongo_client, ensure_indexes
from teamup.errors import TeamUpError
from teamup.events.api import router as events_router
from teamup.monitoring.api import router as monitoring_router
from teamup.monitoring.services import ErrorLogSink
from teamup.notifications.api import router as notifications_router
from teamup.notifications.push import PushSender
from teamup.worker.api import router as offline_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Clients externes créés une seule fois, puis injectés via app.state
    firebase_app = init_firebase_app(settings)
    app.state.verifier = build_verifier(settings, firebase_app)
    app.state.push_sender = PushSender(firebase_app)

    client = create_mongo_client(settings)
    app.state.db = client[settings.MONGO_DB]
    await ensure_indexes(app.state.db)
    logger.info(f"🚀 {settings.APP_NAME} démarrée")

    yield

    client.close()
    logger.info(f"{settings.APP_NAME} arrêtée")


async def teamup_error_handler(request: Request, exc: TeamUpError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Requête invalide sur {request.url.path} : {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "Données invalides", "details": jsonable_encoder(exc.errors())},
    )


async def unexpected_error_handler(request: Request, exc: Exception):
    """Dernier recours : l'erreur est tracée, le client ne reçoit qu'un message générique."""
    logger.exception(f"Erreur inattendue sur {request.method} {request.url.path}")
    try:
        request.app.state.error_sink.report_exception(exc, str(request.url))
    except OSError as e:
        logger.error(f"Impossible d'écrire dans le journal d'erreurs : {e}")
    return JSONResponse(status_code=500, content={"error": "Erreur interne du serveur"})


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.error_sink = ErrorLogSink(settings.LOGS_DIR)

    app.include_router(events_router)
    app.include_router(notifications_router)
    app.include_router(monitoring_router)
    app.include_router(offline_router)

    app.add_exception_handler(TeamUpError, teamup_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    return app


app = create_app()
