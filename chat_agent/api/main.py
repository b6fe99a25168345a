"""
FastAPI application for the chat agent.

Exposes transcript search, the agent loop and a health check, and serves
the static front end from PUBLIC_DIR when it exists.

Usage:
    # Development server with auto-reload
    uvicorn chat_agent.api.main:app --reload --host 0.0.0.0 --port 3000

    # Debug mode (verbose logging)
    LOG_LEVEL=DEBUG uvicorn chat_agent.api.main:app --reload --port 3000
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ..config import config
from ..tools import ToolRegistry
from ..tracing import init_tracing_client, shutdown_tracing
from .routes import agent, health, search


def configure_logging():
    """Configure logging based on LOG_LEVEL."""
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Set level for our modules
    logging.getLogger("chat_agent").setLevel(log_level)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting chat agent API server")

    logger.info("=" * 60)
    logger.info("AGENT CONFIGURATION")
    logger.info(f"  Reasoner: {'openai' if config.agent.remote_enabled else 'local (no OPENAI_API_KEY)'}")
    logger.info(f"  Base URL: {config.agent.base_url}")
    logger.info(f"  Model: {config.agent.model}")
    logger.info(f"  Default Max Steps: {config.agent.default_max_steps}")
    logger.info(f"  Run Timeout: {config.agent.run_timeout}s")

    logger.info("-" * 60)
    logger.info("TOOLS")
    logger.info(f"  Chats Directory: {Path(config.tools.chats_dir).resolve()}")
    for tool in ToolRegistry.all_tools().values():
        logger.info(f"  - {tool.name}: {tool.description}")

    logger.info("-" * 60)
    logger.info("LANGFUSE OBSERVABILITY")
    # Initialize Langfuse tracing
    tracing_client = init_tracing_client(
        public_key=config.langfuse.public_key,
        secret_key=config.langfuse.secret_key,
        host=config.langfuse.host,
        debug=config.langfuse.debug,
    )
    if tracing_client.enabled:
        logger.info("  Status: ENABLED")
    else:
        logger.info("  Status: DISABLED")
        if tracing_client.error:
            logger.info(f"  Reason: {tracing_client.error}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Shutting down chat agent API server")
    shutdown_tracing()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Chat Agent API",
        description="Search chat transcripts and run a small tool-using agent.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(search.router, tags=["Search"])
    app.include_router(agent.router, tags=["Agent"])

    # Return 400 for invalid request bodies
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Log validation errors and answer 400 with an error body."""
        logger.warning(
            f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
        )
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "detail": jsonable_errors(exc)},
        )

    # Mounted last so the API routes take precedence over "/".
    public_dir = Path(config.server.public_dir)
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=public_dir, html=True), name="static")
    else:
        logger.debug(f"Static directory {public_dir} not found, not serving assets")

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Reduce validation errors to JSON-safe location/message pairs."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


# Create the application instance
app = create_app()


def run_server():
    """
    Run the server using uvicorn.

    This is the entry point for running the server programmatically.
    """
    import uvicorn

    uvicorn.run(
        "chat_agent.api.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
        workers=1 if config.server.reload else config.server.workers,
    )


if __name__ == "__main__":
    run_server()
