"""
Storefront - Backend API
Catalog, cart and checkout for the storefront web app
"""
import logging
import time
from typing import Optional

import psycopg2
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from storefront.api import cart, orders, products, users
from storefront.api.responses import action_response
from storefront.core.config import Settings, get_settings
from storefront.core.database import Database, get_database
from storefront.core.errors import BackendUnavailable, StoreError
from storefront.core.rate_limit import RateLimitMiddleware
from storefront.domain.results import ActionResult

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Explicit settings (defaults to the environment / .env)
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.API_TITLE,
        version=settings.API_VERSION,
        description=settings.API_DESCRIPTION,
        debug=settings.API_DEBUG
    )
    app.dependency_overrides[get_settings] = lambda: settings

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        # Failures raised while resolving dependencies still answer with an ActionResult
        logger.warning(f"{request.url.path} failed: {exc.code} ({exc.message})")
        return action_response(ActionResult.from_error(exc))

    app.add_middleware(
        RateLimitMiddleware,
        authenticated_limit=settings.RATE_LIMIT_AUTHENTICATED,
        unauthenticated_limit=settings.RATE_LIMIT_UNAUTHENTICATED
    )
    # Added last so CORS wraps everything, including rate-limited responses
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(cart.router, prefix="/api/v1/cart", tags=["Cart"])
    app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
    app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])

    @app.get("/")
    async def root():
        """Verificación de estado de la API"""
        return {
            "message": settings.API_TITLE,
            "status": "online",
            "version": settings.API_VERSION
        }

    @app.get("/health")
    def health(db: Database = Depends(get_database)):
        """Health check endpoint para monitoreo - tests database connectivity"""
        start_time = time.time()

        db_status = "connected"
        db_latency_ms = None
        db_error = None

        try:
            db_latency_ms = db.ping()
        except (BackendUnavailable, psycopg2.Error) as e:
            db_status = "disconnected"
            db_error = str(e.__cause__ or e)
            logger.warning(f"Health check: database unavailable ({db_error})")

        return {
            "status": "healthy" if db_status == "connected" else "degraded",
            "service": "storefront-api",
            "version": settings.API_VERSION,
            "database": {
                "status": db_status,
                "latency_ms": db_latency_ms,
                "error": db_error
            },
            "total_latency_ms": round((time.time() - start_time) * 1000, 2)
        }

    logger.info(f"{settings.API_TITLE} {settings.API_VERSION} ready")
    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.API_HOST, port=settings.API_PORT)
