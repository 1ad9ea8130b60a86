"""
Storefront Service Application

Thin server routes between the storefront front-end and the commerce
platform: customer session, product catalog, persistent cart and
checkout creation.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from .core.config import settings
from .dependencies import StorefrontServices
from .routes import auth_router, cart_router, checkout_router, products_router, search_router

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Storefront starting up...")
    logger.info(f"Platform URL: {settings.platform_base_url}")
    logger.info(f"Admin API configured: {settings.admin_configured}")

    owns_services = getattr(app.state, "services", None) is None
    if owns_services:
        app.state.services = StorefrontServices.from_settings(settings)

    yield

    logger.info("Storefront shutting down...")
    if owns_services:
        await app.state.services.close()
        app.state.services = None


def create_app(services: Optional[StorefrontServices] = None) -> FastAPI:
    """Build the app; pass `services` to wire in prebuilt collaborators"""
    app = FastAPI(
        title="Storefront",
        description="Headless storefront catalog, cart and checkout routes",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(products_router)
    app.include_router(search_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "storefront",
            "platform_configured": bool(settings.platform_base_url),
            "admin_configured": settings.admin_configured,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
