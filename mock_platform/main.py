"""
Mock Commerce Platform

An in-memory stand-in for the commerce platform's storefront and admin
GraphQL APIs, used for local development and integration tests of the
storefront cart service.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables before the databases read them
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

from .routes import storefront_router, admin_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Mock Platform starting up...")
    logger.info(f"Admin token check: {'enabled' if os.getenv('MOCK_ADMIN_TOKEN') else 'disabled'}")
    yield
    logger.info("Mock Platform shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Mock Platform",
    description="Simulated commerce platform storefront and admin APIs",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(storefront_router)
app.include_router(admin_router)


@app.get("/")
async def home():
    return {
        "message": "Mock Platform API",
        "docs": "/docs",
        "endpoints": {
            "storefront": "/api/{version}/graphql.json",
            "admin": "/admin/api/{version}/graphql.json",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "mock-platform"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mock_platform.main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
    )
