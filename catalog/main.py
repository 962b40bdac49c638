"""Catalog API: FastAPI application factory.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CatalogError → structured JSON responses
    - The AppContext is injected through app.state, never read from module globals
    - No lifespan hook: subsystem startup belongs to the orchestrator (catalog.startup)
"""

from fastapi import FastAPI

from catalog.api.error_handlers import register_error_handlers
from catalog.api.routes import health, products
from catalog.config import get_settings
from catalog.context import AppContext


def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the application around a process-scoped context."""
    app = FastAPI(title="Catalog API", version="1.0.0")
    app.state.context = context or AppContext(get_settings())

    app.include_router(health.router)
    app.include_router(products.router)

    register_error_handlers(app)
    return app
