"""ASGI application factory for the expense tracker API."""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.exceptions import ExpenseTrackerError
from .core.logging import init_logging, request_context_middleware
from .db.migrate import apply_migrations
from .routers import analytics, budgets, categories, expenses

ROUTERS = (categories.router, expenses.router, budgets.router, analytics.router)

logger = logging.getLogger("expense_tracker")


def _register_error_handlers(app: FastAPI) -> None:
    # Most specific first; Exception is the 500 fallback.
    app.add_exception_handler(ExpenseTrackerError, errors.domain_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Build the API around one ledger database.

    ``settings_override`` lets tests point the app at a temporary database;
    without it the cached environment settings are used. Routers read the
    settings back from ``app.state.settings``.
    """
    if settings_override is not None:
        settings_override.init_post_load()
    settings = settings_override or get_settings()
    init_logging(debug=settings.debug)

    try:
        version = apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logger.exception("cannot open ledger database %s", settings.db_path)
        raise
    logger.info("ledger ready at %s (schema v%s)", settings.db_path, version)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.middleware("http")(request_context_middleware)
    _register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/", summary="Service banner")
    async def root():
        return {"message": "Expense Tracker API", "version": settings.version}

    return app
