import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orchard_desk.application import ServiceRegistry, build_services, configure_services
from orchard_desk.core.config import Settings
from orchard_desk.core.logging import configure_logging, get_logger
from orchard_desk.infrastructure import TesseractOCRClient, configure_ocr_client
from orchard_desk.routes import admin, chat, files, harvests, webhook

logger = get_logger("orchard_desk.app")


def create_app(settings: Settings | None = None, services: ServiceRegistry | None = None) -> FastAPI:
    settings = settings or (services.settings if services else Settings.from_env())
    configure_logging(settings.log_level)

    app = FastAPI(title="Orchard Desk API", version="0.1.0")

    if TesseractOCRClient.available():
        configure_ocr_client(TesseractOCRClient(settings.ocr_languages))
    else:
        logger.warning("tesseract not found; image uploads will convert to placeholder text")

    configure_services(services or build_services(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s status=%d duration_ms=%.1f",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    app.include_router(files.router, prefix="/api")
    app.include_router(chat.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")
    app.include_router(harvests.router, prefix="/api")
    app.include_router(webhook.router)

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Orchard Desk API",
                "docs": "/docs",
                "webhook": "/webhook",
            }
        )

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon() -> Response:
        return Response(status_code=204)

    return app


app = create_app()
