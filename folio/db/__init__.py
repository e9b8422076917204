"""SQLAlchemy persistence for résumés and portfolios."""

from .session import Base, build_engine, build_session_factory, init_db
from .tables import PortfolioRow, ResumeRow, ResumeSectionRow

__all__ = [
    "Base",
    "build_engine",
    "build_session_factory",
    "init_db",
    "PortfolioRow",
    "ResumeRow",
    "ResumeSectionRow",
]
