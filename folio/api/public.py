"""Public portfolio pages served by slug."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import HTMLResponse

from .dependencies import Services, get_services
from .portfolios import visitor_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["public"])


@router.get("/{slug}", response_class=HTMLResponse)
def portfolio_page(
    slug: str,
    request: Request,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """Render the active portfolio for `slug`; unknown slugs get a 404 page."""
    page = services.resolver.resolve(slug)
    response = HTMLResponse(content=page.html, status_code=page.status)

    if page.found:
        session_id = visitor_session(request, response)
        background_tasks.add_task(services.views.record_view, page.portfolio_id, session_id)
        response.background = background_tasks
    return response
