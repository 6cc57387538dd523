"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from printdispatch import __version__
from printdispatch.api.dependencies import init_dependencies
from printdispatch.api.routes import error_status, router
from printdispatch.errors import BadRequestError
from printdispatch.fetcher import Fetcher
from printdispatch.generator import DocumentGenerator
from printdispatch.orchestrator import PrinterContext, PrintOrchestrator
from printdispatch.presets import PresetRegistry
from printdispatch.printers import PrinterRegistry

logger = logging.getLogger(__name__)


def create_app(
    printers: PrinterRegistry,
    presets: PresetRegistry,
    fetcher: Fetcher = None,
    generator: DocumentGenerator = None,
    cors_origins: list[str] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        printers: Configured printer registry
        presets: Configured preset registry
        fetcher: Document fetcher (default: HTTP fetcher with 30s timeout)
        generator: Template renderer (default: Typst)
        cors_origins: List of allowed CORS origins (None = allow all)
        debug: Enable debug mode

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Print Dispatch Server",
        description="Prints documents from URLs using named presets",
        version=__version__,
        debug=debug
    )

    # CORS configuration
    if cors_origins is None:
        # Development: allow all origins
        cors_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    orchestrator = PrintOrchestrator(PrinterContext(presets, printers), generator)
    init_dependencies(app, orchestrator, fetcher or Fetcher())

    @app.exception_handler(RequestValidationError)
    async def invalid_request_body(request: Request, exc: RequestValidationError):
        error = BadRequestError("invalid request body", {"errors": exc.errors()})
        logger.error(f"[{request.url.path}] {error}: {exc.errors()}")
        return JSONResponse(status_code=error_status(error), content={"detail": str(error)})

    # Include routes
    app.include_router(router)

    @app.on_event("startup")
    async def startup():
        logger.info("Print Dispatch Server starting...")
        statuses = await printers.get_all_status()
        for printer_id, status in statuses.items():
            printer = printers.get(printer_id)
            logger.info(f"  {printer.name} ({printer_id}): {status.value}")

        configured = presets.list_presets()
        if configured:
            logger.info("Configured presets:")
            for name, info in configured.items():
                templated = " (templated)" if info["templated"] else ""
                logger.info(f"  {name} -> {info['printer_id']}{templated}")

    @app.on_event("shutdown")
    async def shutdown():
        logger.info("Print Dispatch Server shutting down...")

    return app
