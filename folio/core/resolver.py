"""Public resolver - slug to rendered portfolio page."""

import logging
from typing import List, Optional, Tuple

from pydantic import BaseModel

from ..errors import InvalidSlug
from ..models import DisplaySettings, Portfolio, Resume, ResumeSection
from ..services import PortfolioStore
from .renderer import TemplateRenderer
from .slugs import normalize

logger = logging.getLogger(__name__)


class RenderedPage(BaseModel):
    """A page ready to serve; status is 200 or 404."""
    status: int
    html: str
    portfolio_id: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.status == 200


class PublicResolver:
    """Serves a portfolio by slug, preferring its frozen content snapshot.

    Portfolios published before snapshots existed fall back to the live
    résumé, rendered with the portfolio's own template and settings.
    """

    def __init__(self, store: PortfolioStore, renderer: TemplateRenderer, create_url: str = "/"):
        self.store = store
        self.renderer = renderer
        self.create_url = create_url

    def _not_found(self, slug: str) -> RenderedPage:
        return RenderedPage(status=404, html=self.renderer.render_not_found(slug, self.create_url))

    def _content_for(
        self, portfolio: Portfolio
    ) -> Optional[Tuple[Resume, List[ResumeSection], Optional[str], DisplaySettings]]:
        snapshot = portfolio.content
        if snapshot is not None:
            config = snapshot.config
            theme_color = config.theme_color or portfolio.theme_color
            return (
                snapshot.resume,
                snapshot.sections,
                config.template_id or portfolio.template_id,
                config.settings.with_theme_color(theme_color),
            )

        if portfolio.resume_id is None:
            return None
        live = self.store.load_resume(portfolio.resume_id)
        if live is None:
            return None
        resume, sections = live
        logger.debug(f"Portfolio {portfolio.id} has no snapshot, rendering live resume")
        return resume, sections, portfolio.template_id, portfolio.settings.with_theme_color(portfolio.theme_color)

    def resolve(self, slug: str) -> RenderedPage:
        """Render the active portfolio for `slug`, or the not-found page."""
        try:
            key = normalize(slug)
        except InvalidSlug:
            return self._not_found(slug)

        portfolio = self.store.get_active_by_slug(key)
        if portfolio is None:
            logger.info(f"No active portfolio for slug '{key}'")
            return self._not_found(key)

        content = self._content_for(portfolio)
        if content is None:
            logger.warning(f"Portfolio {portfolio.id} points at missing resume {portfolio.resume_id}")
            return self._not_found(key)

        resume, sections, template_id, settings = content
        html = self.renderer.render(resume, sections, template_id, settings)
        return RenderedPage(status=200, html=html, portfolio_id=portfolio.id)
