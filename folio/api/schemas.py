"""Request and response bodies for the HTTP surface.

Bodies use the camelCase keys the editor sends; snake_case is accepted too.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import Deployment, DisplaySettings, Portfolio, PublishRequest, Resume, ResumeSection


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SlugAvailability(ApiModel):
    slug: str
    available: bool


class RecordViewBody(ApiModel):
    portfolio_id: int = Field(alias="portfolioId")


class RecordViewResponse(ApiModel):
    accepted: bool = True


class GenerateBody(ApiModel):
    resume: Resume
    sections: List[ResumeSection] = Field(default_factory=list)
    template_id: Optional[str] = Field(default=None, alias="templateId")
    settings: DisplaySettings = Field(default_factory=DisplaySettings)


class GenerateResponse(ApiModel):
    html: str


class PublishBody(GenerateBody):
    theme_color: Optional[str] = Field(default=None, alias="themeColor")
    slug: str
    portfolio_id: Optional[int] = Field(
        default=None,
        alias="portfolioId",
        description="Existing portfolio when republishing"
    )

    def to_request(self, existing: Optional[Portfolio] = None) -> PublishRequest:
        return PublishRequest(
            resume=self.resume,
            sections=self.sections,
            template_id=self.template_id or self.resume.template_id or "modern",
            theme_color=self.theme_color,
            slug=self.slug,
            settings=self.settings,
            existing_portfolio=existing,
        )


class PersistBody(PublishBody):
    deployment: Deployment


class PortfolioUpdate(ApiModel):
    """Partial edit of a published portfolio; omitted fields are unchanged."""
    title: Optional[str] = None
    settings: Optional[DisplaySettings] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class ErrorBody(ApiModel):
    step: str
    error: str
    retryable: bool = False
    deployment: Optional[Deployment] = None
