# app/main.py
from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from contextlib import asynccontextmanager
from typing import Optional
from app.config import Settings, settings
from app.errors import InvalidEmail, StoreUnavailable, Unauthorized
from app.middleware.cors import setup_cors
from app.auth.dependencies import get_store
from app.subscribers import SubscriberStore, build_store
from app.routes.notify import router as notify_router
from app.routes.admin import router as admin_router

import logging

# Configure logging
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

def create_app(
    app_settings: Optional[Settings] = None,
    store: Optional[SubscriberStore] = None
) -> FastAPI:
    """Build the API; the store is opened on startup and closed on shutdown"""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        # Startup
        logger.info(f"Starting notify API ({app_settings.environment})...")
        try:
            active_store = store or build_store(app_settings)
            await active_store.init()
            logger.info(f"Subscriber store ready: {active_store.backend_name}")
        except Exception as e:
            logger.error(f"Failed to initialize subscriber store: {e}")
            raise
        app.state.store = active_store

        yield

        # Shutdown
        logger.info("Shutting down notify API...")
        try:
            await active_store.close()
            logger.info("Subscriber store closed")
        except Exception as e:
            logger.warning(f"Error closing subscriber store: {e}")

    app = FastAPI(
        title="Notify API",
        description="Email waitlist subscriptions with CSV export",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = app_settings

    # Setup CORS
    setup_cors(app, app_settings)

    app.include_router(notify_router)
    app.include_router(admin_router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Notify API OK"

    @app.get("/health")
    async def health_check(store: SubscriberStore = Depends(get_store)):
        """Health check including the subscriber store"""
        try:
            await store.ping()
        except StoreUnavailable as e:
            logger.error(f"Store health check failed: {e}")
            return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})
        return {"ok": True}

    @app.exception_handler(InvalidEmail)
    async def invalid_email_handler(request: Request, exc: InvalidEmail):
        logger.warning(f"Rejected invalid email on {request.url.path}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": InvalidEmail.message}
        )

    @app.exception_handler(Unauthorized)
    async def unauthorized_handler(request: Request, exc: Unauthorized):
        return PlainTextResponse(Unauthorized.message, status_code=exc.status_code)

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
        logger.error(f"Store unavailable on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": StoreUnavailable.message}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"ok": False, "error": "Error en el servidor"}
        )

    return app

app = create_app()

def run():
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)

if __name__ == "__main__":
    run()
