import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import REQUEST_ID_HEADER, init_logging, request_context_middleware
from .core import errors
from .db.dal import Database, StoreError
from .db.migrate import apply_migrations
from .routers import auth, expenses, health
from .services.access import AccessMediator
from .services.accounts import AccountManager
from .services.credentials import CredentialStore
from .services.ledger import ExpenseLedger
from .services.tokens import TokenService

CORS_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
CORS_HEADERS = [
    "Authorization",
    "Content-Type",
    "Accept",
    "Origin",
    "X-Requested-With",
    REQUEST_ID_HEADER,
]


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Build the API: schema, services, middleware, handlers and routers.

    ``settings_override`` replaces the cached environment settings, which is
    how tests point each app at its own sqlite file.
    """
    settings = settings_override or get_settings()
    init_logging(debug=settings.debug)

    # Brings a fresh or older database file up to the current schema.
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        logging.getLogger("expense_tracker").exception(
            "could not migrate database at %s", settings.db_path
        )
        raise

    docs_enabled = settings.enable_api_docs
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        docs_url="/api/docs" if docs_enabled else None,
        openapi_url="/api/openapi.json" if docs_enabled else None,
        redoc_url=None,
    )

    # Core services; the token secret is fixed for the lifetime of the app
    db = Database(settings.db_path, timeout=settings.db_timeout_seconds)  # type: ignore[arg-type]
    accounts = AccountManager(db, CredentialStore(rounds=settings.bcrypt_rounds))
    tokens = TokenService(settings.token_config())
    app.state.settings = settings
    app.state.db = db
    app.state.accounts = accounts
    app.state.tokens = tokens
    app.state.ledger = ExpenseLedger(db)
    app.state.access = AccessMediator(tokens, accounts)

    # Middleware (request id / structured logging, then CORS outermost)
    app.middleware("http")(request_context_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
    )

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(StoreError, errors.server_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(expenses.router)

    return app


app = create_app()
