"""
Dependency injection for API routes.

Collaborators are attached to app.state by create_app, so every app (and
every test client) carries its own registries.
"""

from fastapi import Request

from printdispatch.fetcher import Fetcher
from printdispatch.orchestrator import PrinterContext, PrintOrchestrator


def init_dependencies(app, orchestrator: PrintOrchestrator, fetcher: Fetcher):
    """Attach collaborators to the app."""
    app.state.orchestrator = orchestrator
    app.state.fetcher = fetcher


def get_orchestrator(request: Request) -> PrintOrchestrator:
    """Get print orchestrator instance."""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise RuntimeError("Orchestrator not initialized")
    return orchestrator


def get_fetcher(request: Request) -> Fetcher:
    """Get fetcher instance."""
    fetcher = getattr(request.app.state, "fetcher", None)
    if fetcher is None:
        raise RuntimeError("Fetcher not initialized")
    return fetcher


def get_context(request: Request) -> PrinterContext:
    """Get preset and printer registries."""
    return get_orchestrator(request).context
