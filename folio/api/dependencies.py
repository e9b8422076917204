"""Shared services and FastAPI dependency providers."""

from fastapi import Request
from sqlalchemy.engine import Engine

from ..core import PublicResolver, PublishOrchestrator, SlugRegistry, TemplateRenderer, ViewRecorder
from ..core.pipeline import HostingFactory
from ..models import AppConfig
from ..services import PortfolioStore

SESSION_COOKIE = "folio_session"
SESSION_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


class Services:
    """Long-lived collaborators built once per application."""

    def __init__(
        self,
        config: AppConfig,
        engine: Engine,
        store: PortfolioStore,
        renderer: TemplateRenderer,
        hosting_factory: HostingFactory,
    ):
        self.config = config
        self.engine = engine
        self.store = store
        self.renderer = renderer
        self.hosting_factory = hosting_factory
        self.slugs = SlugRegistry(store)
        self.resolver = PublicResolver(store, renderer, create_url=config.public_base_url)
        self.views = ViewRecorder(store, cache_size=config.view_cache_size)

    def orchestrator(self) -> PublishOrchestrator:
        # One orchestrator per publish; it holds that publish's progress
        return PublishOrchestrator(self.config, self.store, self.renderer, self.hosting_factory)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_store(request: Request) -> PortfolioStore:
    return get_services(request).store


def get_renderer(request: Request) -> TemplateRenderer:
    return get_services(request).renderer
