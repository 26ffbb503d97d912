from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from loguru import logger

from mock_backend.config.settings import Settings, settings as default_settings
from mock_backend.middleware.prefix_rewriter import PrefixRewriter
from mock_backend.middleware.request_logger import RequestLogger
from mock_backend.routes.auth import build_auth_router
from mock_backend.routes.resources import router as resources_router
from mock_backend.store.document_store import DocumentStore, open_store
from mock_backend.utils.errors import add_exception_handlers


def create_app(store: Optional[DocumentStore] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the mock backend.

    Without an explicit store the database file named by ``DB_PATH`` is
    loaded; tests pass a store over a MemoryBackend instead.
    """
    settings = settings or default_settings
    if store is None:
        store = open_store(settings.DB_PATH, id_field=settings.ID_FIELD,
                           foreign_key_suffix=settings.FOREIGN_KEY_SUFFIX)

    app = FastAPI(
        title=settings.APP_NAME,
        description="JSON-file-backed mock REST backend with a login route",
        version=settings.APP_VERSION,
        docs_url="/__docs",
        redoc_url=None,
        openapi_url="/__openapi.json",
    )
    app.state.store = store
    app.state.settings = settings

    add_exception_handlers(app)

    # Login first so it wins over /{name}/{record_id}/{child}
    app.include_router(build_auth_router(settings.login_route))
    app.include_router(resources_router)

    # Last added runs first
    app.add_middleware(PrefixRewriter, prefix=settings.API_PREFIX,
                       exempt=[("POST", settings.login_route)])
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLogger)

    logger.debug(f"App ready with resources: {', '.join(store.names()) or '(none)'}")
    return app
