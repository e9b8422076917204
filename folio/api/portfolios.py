"""Editor-facing endpoints: slug checks, preview, publish and record management."""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query, Request, Response, status
from pydantic import SecretStr

from ..core import TemplateRenderer, normalize
from ..models import Portfolio, PublishResult
from ..services import PortfolioStore
from .dependencies import (
    SESSION_COOKIE,
    SESSION_COOKIE_MAX_AGE,
    Services,
    get_renderer,
    get_services,
    get_store,
)
from .schemas import (
    GenerateBody,
    GenerateResponse,
    PersistBody,
    PortfolioUpdate,
    PublishBody,
    RecordViewBody,
    RecordViewResponse,
    SlugAvailability,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["portfolios"])


def visitor_session(request: Request, response: Response) -> str:
    """Session id from the visitor cookie, issuing a new cookie when absent."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(
            SESSION_COOKIE,
            session_id,
            max_age=SESSION_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax",
        )
    return session_id


def _existing_portfolio(store: PortfolioStore, portfolio_id: Optional[int]) -> Optional[Portfolio]:
    if portfolio_id is None:
        return None
    portfolio = store.get(portfolio_id)
    if portfolio is None:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return portfolio


@router.get("/check-slug", response_model=SlugAvailability)
def check_slug(
    slug: str = Query(..., min_length=1),
    portfolio_id: Optional[int] = Query(None, alias="portfolioId"),
    services: Services = Depends(get_services),
):
    """Advisory availability check; the publish itself is authoritative."""
    normalized = normalize(slug)
    available = services.slugs.check_availability(normalized, exclude_portfolio_id=portfolio_id)
    return SlugAvailability(slug=normalized, available=available)


@router.post(
    "/portfolio/record-view",
    response_model=RecordViewResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def record_view(
    body: RecordViewBody,
    request: Request,
    response: Response,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    session_id = visitor_session(request, response)
    background_tasks.add_task(services.views.record_view, body.portfolio_id, session_id)
    return RecordViewResponse()


@router.post("/portfolio/generate", response_model=GenerateResponse)
def generate(body: GenerateBody, renderer: TemplateRenderer = Depends(get_renderer)):
    """Render a preview; the same bytes a publish would deploy."""
    html = renderer.render(body.resume, body.sections, body.template_id, body.settings)
    return GenerateResponse(html=html)


@router.post("/portfolio/publish", response_model=PublishResult)
async def publish(
    body: PublishBody,
    hosting_token: str = Header(..., alias="X-Hosting-Token", min_length=1),
    services: Services = Depends(get_services),
):
    """Deploy the portfolio and record it. Errors carry the failing step."""
    existing = _existing_portfolio(services.store, body.portfolio_id)
    orchestrator = services.orchestrator()
    return await orchestrator.publish(body.to_request(existing), SecretStr(hosting_token))


@router.post("/portfolio/persist", response_model=Portfolio)
def persist(body: PersistBody, services: Services = Depends(get_services)):
    """Retry only the record write for a site that is already live."""
    existing = _existing_portfolio(services.store, body.portfolio_id)
    return services.orchestrator().persist(body.to_request(existing), body.deployment)


@router.get("/portfolios", response_model=List[Portfolio])
def list_portfolios(resume_id: str = Query(...), store: PortfolioStore = Depends(get_store)):
    return store.list_for_resume(resume_id)


@router.post("/portfolios/{portfolio_id}/deactivate", response_model=Portfolio)
def deactivate(portfolio_id: int, store: PortfolioStore = Depends(get_store)):
    portfolio = store.deactivate(portfolio_id)
    if portfolio is None:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return portfolio


@router.get("/portfolios/{portfolio_id}", response_model=Portfolio)
def get_portfolio(portfolio_id: int, store: PortfolioStore = Depends(get_store)):
    return _existing_portfolio(store, portfolio_id)


@router.patch("/portfolios/{portfolio_id}", response_model=Portfolio)
def update_portfolio(portfolio_id: int, body: PortfolioUpdate, store: PortfolioStore = Depends(get_store)):
    """Toggle activation or edit title and display settings without redeploying.

    Reactivating a portfolio whose slug was taken meanwhile fails with 409.
    """
    portfolio = store.update(
        portfolio_id,
        title=body.title,
        settings=body.settings,
        is_active=body.is_active,
    )
    if portfolio is None:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return portfolio
