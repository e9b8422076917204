"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional, Type

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..core import TemplateRenderer
from ..core.pipeline import HostingFactory
from ..db import build_engine, build_session_factory, init_db
from ..errors import (
    ContentUploadFailed,
    CredentialInvalid,
    HostingNotReady,
    InvalidSlug,
    PersistFailed,
    PublishError,
    RepoCreateFailed,
    SlugTaken,
)
from ..models import AppConfig
from ..services import GitHubHostingService, PortfolioStore
from . import portfolios, public
from .dependencies import Services
from .schemas import ErrorBody

logger = logging.getLogger(__name__)

# Most specific class wins; anything else is a 502 from the hosting side
ERROR_STATUS: Dict[Type[PublishError], int] = {
    CredentialInvalid: 401,
    SlugTaken: 409,
    InvalidSlug: 422,
    HostingNotReady: 503,
    RepoCreateFailed: 502,
    ContentUploadFailed: 502,
    PersistFailed: 500,
}


def status_for(error: PublishError) -> int:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return 502


async def publish_error_handler(request: Request, exc: PublishError) -> JSONResponse:
    body = ErrorBody(
        step=exc.step,
        error=exc.reason,
        retryable=exc.retryable,
        deployment=getattr(exc, "deployment", None),
    )
    return JSONResponse(status_code=status_for(exc), content=body.model_dump(mode="json"))


def create_app(
    config: Optional[AppConfig] = None,
    hosting_factory: HostingFactory = GitHubHostingService,
) -> FastAPI:
    """Build the application and its services.

    Args:
        config: Application configuration, loaded from the environment if None
        hosting_factory: Builds hosting clients; tests pass a fake
    """
    config = config or AppConfig()

    engine = build_engine(config.database)
    init_db(engine)
    services = Services(
        config=config,
        engine=engine,
        store=PortfolioStore(build_session_factory(engine)),
        renderer=TemplateRenderer(config.render),
        hosting_factory=hosting_factory,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Folio {__version__} serving public pages at {config.public_base_url}")
        yield
        engine.dispose()

    app = FastAPI(title="Folio API", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.add_exception_handler(PublishError, publish_error_handler)

    @app.get("/health", tags=["health"])
    async def health():
        """Health check endpoint returning service status."""
        return {"status": "ok"}

    app.include_router(portfolios.router)
    # Catch-all slug route goes last so it cannot shadow the routes above
    app.include_router(public.router)

    return app
