from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional

from .resume import Resume, ResumeSection


class DisplaySettings(BaseModel):
    """Per-portfolio display options chosen in the publish dialog.

    Accepts the camelCase keys the editor sends.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    visible_sections: Optional[List[str]] = Field(
        default=None,
        alias="visibleSections",
        description="Section types to render; None applies the default policy"
    )
    show_photo: bool = Field(default=False, alias="showPhoto")
    photo_url: Optional[str] = Field(default=None, alias="photoUrl")
    custom_title: Optional[str] = Field(default=None, alias="customTitle")
    custom_user: Optional[str] = Field(default=None, alias="customUser")
    color: Optional[str] = None
    font: Optional[str] = None

    def with_theme_color(self, theme_color: Optional[str]) -> "DisplaySettings":
        """Copy whose accent colour is the portfolio's theme colour, if any."""
        if not theme_color:
            return self
        return self.model_copy(update={"color": theme_color})


class SnapshotConfig(BaseModel):
    """Visual configuration frozen alongside the content."""
    template_id: str
    theme_color: Optional[str] = None
    settings: DisplaySettings = Field(default_factory=DisplaySettings)


class ContentSnapshot(BaseModel):
    """Frozen copy of a résumé and its sections at publish time.

    Public pages render from this, so later edits to the résumé do not
    leak out until the next republish.
    """
    resume: Resume
    sections: List[ResumeSection] = Field(default_factory=list)
    config: SnapshotConfig


class Portfolio(BaseModel):
    """Durable record of what is live for one slug."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str = ""
    slug: str
    resume_id: Optional[str] = None
    repo: Optional[str] = None
    url: Optional[str] = None
    template_id: str = "modern"
    theme_color: Optional[str] = None
    settings: DisplaySettings = Field(default_factory=DisplaySettings)
    content: Optional[ContentSnapshot] = None
    is_active: bool = True
    views: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("settings", mode="before")
    @classmethod
    def _default_settings(cls, value):
        # Rows written before display settings existed hold NULL
        return {} if value is None else value


class Deployment(BaseModel):
    """Where a publish landed on the hosting service."""
    owner: str
    repo: str
    url: str


class PublishRequest(BaseModel):
    """Everything a publish needs except the credential."""
    resume: Resume
    sections: List[ResumeSection] = Field(default_factory=list)
    template_id: str = "modern"
    theme_color: Optional[str] = None
    slug: str = Field(description="Slug candidate, normalized before use")
    settings: DisplaySettings = Field(default_factory=DisplaySettings)
    existing_portfolio: Optional[Portfolio] = Field(
        default=None,
        description="Set when republishing; its repo and url are reused"
    )

    def snapshot(self) -> ContentSnapshot:
        """Deep copy of the publish inputs, detached from the caller's objects."""
        return ContentSnapshot(
            resume=self.resume.model_copy(deep=True),
            sections=[s.model_copy(deep=True) for s in self.sections],
            config=SnapshotConfig(
                template_id=self.template_id,
                theme_color=self.theme_color,
                settings=self.settings.model_copy(deep=True),
            ),
        )


class PublishResult(BaseModel):
    """Outcome of a completed publish."""
    url: str
    repo: str
    portfolio: Portfolio
