from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)

from .session import Base


class ResumeRow(Base):
    """Résumé as written by the editor. Read-only from this package."""
    __tablename__ = "resumes"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(128), index=True)
    title = Column(String(255), nullable=False, default="")
    job_title = Column(String(255))
    template_id = Column(String(50))
    theme_color = Column(String(16))
    settings = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ResumeSectionRow(Base):
    __tablename__ = "resume_sections"

    # Autoincrement seq keeps insertion order for order_index ties
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, nullable=False)
    resume_id = Column(String(64), ForeignKey("resumes.id", ondelete="CASCADE"), nullable=False, index=True)
    section_type = Column(String(50), nullable=False)
    title = Column(String(255), default="")
    content = Column(JSON)
    order_index = Column(Integer, nullable=False, default=0)


class PortfolioRow(Base):
    __tablename__ = "portfolios"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, default="")
    slug = Column(String(100), nullable=False, index=True)
    resume_id = Column(String(64), ForeignKey("resumes.id", ondelete="SET NULL"), index=True)
    repo = Column(String(100))
    url = Column(String(500))
    template_id = Column(String(50), nullable=False, default="modern")
    theme_color = Column(String(16))
    settings = Column(JSON, default=dict)
    content = Column(JSON)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    views = Column(Integer, nullable=False, default=0, server_default=text("0"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # At most one active portfolio per case-insensitive slug
        Index(
            "uq_portfolios_active_slug",
            func.lower(slug),
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )
