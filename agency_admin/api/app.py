"""FastAPI application for the agency admin console."""

import contextlib
import logging

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables from .env file
load_dotenv()

from ..infrastructure.config import ConsoleConfig
from ..infrastructure.dependencies import get_service_container
from .endpoints import agencies, claims, health, imports, messages, users

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the adapters on startup and close them on shutdown."""
    container = get_service_container()
    try:
        await container.startup()
    except ConnectionError as e:
        logger.error(f"❌ Failed to initialize adapters: {e}")

    yield  # Application runs here

    await container.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Agency Admin Console API",
    description="Claim review, agency and user administration for the agency directory",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # TODO: restrict to the admin front-end origin once it is deployed
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(claims.router)
app.include_router(imports.router)
app.include_router(agencies.router)
app.include_router(users.router)
app.include_router(messages.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors and answer with the admin API error envelope."""
    logger.error(f"❌ Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred"}},
    )


def run() -> None:
    """Serve the console API with uvicorn."""
    config = ConsoleConfig.from_env()
    logger.info(f"🌐 Starting console API on {config.host}:{config.port}")
    uvicorn.run("agency_admin.api.app:app", host=config.host, port=config.port)


if __name__ == "__main__":
    run()
