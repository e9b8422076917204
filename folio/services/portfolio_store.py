"""Portfolio record store - durable slug -> deployment mapping.

Backed by SQLAlchemy. The active-slug unique index on `portfolios` is the
authority on slug uniqueness; violations surface as SlugTaken.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import SlugTaken
from ..db import PortfolioRow, ResumeRow, ResumeSectionRow
from ..models import (
    ContentSnapshot,
    DisplaySettings,
    Portfolio,
    Resume,
    ResumeSection,
    ResumeSettings,
)

logger = logging.getLogger(__name__)


class PortfolioStoreError(Exception):
    """Raised when the record store cannot complete a write."""
    pass


class PortfolioStore:
    """CRUD over portfolios plus read access to live résumé data.

    Each method runs in its own short session so the store can be shared
    across concurrent requests.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    # === Reads ===

    def get(self, portfolio_id: int) -> Optional[Portfolio]:
        with self._session() as session:
            row = session.get(PortfolioRow, portfolio_id)
            return Portfolio.model_validate(row) if row else None

    def get_active_by_slug(self, slug: str) -> Optional[Portfolio]:
        with self._session() as session:
            row = (
                session.query(PortfolioRow)
                .filter(func.lower(PortfolioRow.slug) == slug.lower())
                .filter(PortfolioRow.is_active.is_(True))
                .first()
            )
            return Portfolio.model_validate(row) if row else None

    def list_for_resume(self, resume_id: str) -> List[Portfolio]:
        with self._session() as session:
            rows = (
                session.query(PortfolioRow)
                .filter(PortfolioRow.resume_id == resume_id)
                .order_by(PortfolioRow.created_at.desc(), PortfolioRow.id.desc())
                .all()
            )
            return [Portfolio.model_validate(r) for r in rows]

    def slug_in_use(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        with self._session() as session:
            query = (
                session.query(PortfolioRow.id)
                .filter(func.lower(PortfolioRow.slug) == slug.lower())
                .filter(PortfolioRow.is_active.is_(True))
            )
            if exclude_id is not None:
                query = query.filter(PortfolioRow.id != exclude_id)
            return query.first() is not None

    def load_resume(self, resume_id: str) -> Optional[Tuple[Resume, List[ResumeSection]]]:
        """Live résumé and its sections in order_index order (ties by insertion)."""
        with self._session() as session:
            row = session.get(ResumeRow, resume_id)
            if row is None:
                return None

            section_rows = (
                session.query(ResumeSectionRow)
                .filter(ResumeSectionRow.resume_id == resume_id)
                .order_by(ResumeSectionRow.order_index, ResumeSectionRow.seq)
                .all()
            )

            resume = Resume(
                id=row.id,
                user_id=row.user_id,
                title=row.title or "",
                job_title=row.job_title,
                template_id=row.template_id,
                theme_color=row.theme_color,
                settings=ResumeSettings.model_validate(row.settings or {}),
            )
            sections = [
                ResumeSection(
                    id=s.id,
                    resume_id=s.resume_id,
                    section_type=s.section_type,
                    title=s.title or "",
                    content=s.content,
                    order_index=s.order_index,
                )
                for s in section_rows
            ]
            return resume, sections

    # === Writes ===

    def save_published(
        self,
        *,
        resume_id: str,
        title: str,
        slug: str,
        repo: str,
        url: str,
        template_id: str,
        theme_color: Optional[str],
        settings: DisplaySettings,
        content: ContentSnapshot,
        portfolio_id: Optional[int] = None,
    ) -> Portfolio:
        """Insert a new portfolio or update an existing one after a deploy.

        repo and url are written once and never reassigned; a republish
        only replaces the snapshot and display fields.

        Raises:
            SlugTaken: another active portfolio holds the slug.
            PortfolioStoreError: any other storage failure.
        """
        with self._session() as session:
            try:
                if portfolio_id is None:
                    row = PortfolioRow(resume_id=resume_id, repo=repo, url=url, views=0)
                    session.add(row)
                else:
                    row = session.get(PortfolioRow, portfolio_id)
                    if row is None:
                        raise PortfolioStoreError(f"Portfolio {portfolio_id} not found")
                    if row.repo is None:
                        row.repo = repo
                    if row.url is None:
                        row.url = url

                row.title = title
                row.slug = slug
                row.template_id = template_id
                row.theme_color = theme_color
                row.settings = settings.model_dump(mode="json")
                row.content = content.model_dump(mode="json")
                row.is_active = True

                session.commit()
                session.refresh(row)
            except IntegrityError as e:
                session.rollback()
                logger.warning(f"Slug '{slug}' rejected by unique index")
                raise SlugTaken(slug, step="PERSISTING_RECORD") from e
            except SQLAlchemyError as e:
                session.rollback()
                raise PortfolioStoreError(str(e)) from e

            logger.info(f"Saved portfolio {row.id} for slug '{slug}'")
            return Portfolio.model_validate(row)

    def deactivate(self, portfolio_id: int) -> Optional[Portfolio]:
        """Soft delete; frees the slug for other portfolios."""
        with self._session() as session:
            row = session.get(PortfolioRow, portfolio_id)
            if row is None:
                return None
            row.is_active = False
            session.commit()
            session.refresh(row)
            logger.info(f"Deactivated portfolio {portfolio_id} ('{row.slug}')")
            return Portfolio.model_validate(row)

    def update(
        self,
        portfolio_id: int,
        *,
        title: Optional[str] = None,
        settings: Optional[DisplaySettings] = None,
        is_active: Optional[bool] = None,
    ) -> Optional[Portfolio]:
        """Edit display fields or toggle activation without redeploying.

        Fields left as None are unchanged. Reactivation goes through the
        active-slug index, so it fails when another portfolio took the slug.

        Raises:
            SlugTaken: reactivating while another active portfolio holds the slug.
            PortfolioStoreError: any other storage failure.
        """
        with self._session() as session:
            row = session.get(PortfolioRow, portfolio_id)
            if row is None:
                return None
            slug = row.slug
            try:
                if title is not None:
                    row.title = title
                if settings is not None:
                    row.settings = settings.model_dump(mode="json")
                if is_active is not None:
                    row.is_active = is_active
                session.commit()
                session.refresh(row)
            except IntegrityError as e:
                session.rollback()
                logger.warning(f"Reactivating portfolio {portfolio_id} rejected, slug '{slug}' is taken")
                raise SlugTaken(slug, step="IDLE") from e
            except SQLAlchemyError as e:
                session.rollback()
                raise PortfolioStoreError(str(e)) from e

            logger.info(f"Updated portfolio {portfolio_id} ('{slug}')")
            return Portfolio.model_validate(row)

    def increment_views(self, portfolio_id: int) -> bool:
        """Atomically add one view; False when the portfolio is missing or inactive."""
        with self._session() as session:
            result = session.execute(
                update(PortfolioRow)
                .where(PortfolioRow.id == portfolio_id)
                .where(PortfolioRow.is_active.is_(True))
                .values(views=PortfolioRow.views + 1)
            )
            session.commit()
            return result.rowcount > 0
