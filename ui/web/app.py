"""
FastAPI Application - Main web application setup
===============================================

This module creates and configures the FastAPI application
with the question and pattern management routes.
"""

import uuid
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from core.config import Config, load_config
from core.logging import setup_logging, get_logger, set_log_context, clear_log_context
from matching.engine import PatternMatcher
from matching.store import FilePatternSource
from matching.templates import find_placeholders

logger = get_logger("web.app")


def create_app(
    config: Optional[Config] = None,
    matcher: Optional[PatternMatcher] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        matcher: Pattern matcher; built from ``config`` if not provided
        debug: Enable debug mode

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = load_config()

    setup_logging(
        log_dir=config.log_dir or None,
        log_level="DEBUG" if debug else "INFO",
        console_output=True
    )

    if matcher is None:
        matcher = PatternMatcher(
            source=FilePatternSource(config.patterns_path),
            config=config.matcher
        )

    app = FastAPI(
        title=config.app_name,
        description="Trained-response question answering and pattern management",
        version=config.version,
        debug=debug or config.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    templates_dir = Path(__file__).parent / "templates"
    templates = Jinja2Templates(directory=str(templates_dir))
    templates.env.filters["placeholders"] = find_placeholders

    app.state.config = config
    app.state.matcher = matcher
    app.state.templates = templates

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        set_log_context(request_id=uuid.uuid4().hex[:8], path=request.url.path)
        try:
            return await call_next(request)
        finally:
            clear_log_context()

    from .routes import router as main_router
    app.include_router(main_router, prefix="")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc) if debug else "An error occurred"}
        )

    logger.info(f"Web application created with {len(matcher)} patterns")

    return app


def run_app(
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    config: Optional[Config] = None
) -> None:
    """
    Run the web application server.

    Args:
        host: Host address to bind
        port: Port to listen on
        debug: Enable debug mode
        config: Application configuration
    """
    if config is None:
        config = load_config()

    app = create_app(config=config, debug=debug)

    logger.info(f"Starting web server on {host}:{port}")

    import uvicorn
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="debug" if debug else "info"
    )
