from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional, Union


class SectionType(str, Enum):
    """Known résumé section types.

    Sections with any other type string are still accepted and rendered
    through the generic fragment.
    """
    SUMMARY = "summary"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    PROJECTS = "projects"
    CERTIFICATIONS = "certifications"
    LANGUAGES = "languages"
    ACHIEVEMENTS = "achievements"
    PERSONAL_INFO = "personal_info"
    DECLARATION = "declaration"
    CUSTOM = "custom"


class ResumeSettings(BaseModel):
    """Editor-side display preferences stored on the résumé."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    font: Optional[str] = None
    hidden_sections: List[str] = Field(
        default_factory=list,
        alias="hiddenSections",
        description="Section types the owner hid in the editor"
    )


class ResumeSection(BaseModel):
    """One ordered section of a résumé.

    `content` is an opaque payload whose shape depends on `section_type`;
    the renderer copes with anything found there.
    """
    model_config = ConfigDict(use_enum_values=True)

    id: str
    resume_id: Optional[str] = None
    section_type: Union[SectionType, str]
    title: str = ""
    content: Any = None
    order_index: int = 0


class Resume(BaseModel):
    """Normalized résumé as supplied by the editor."""
    id: str
    user_id: Optional[str] = None
    title: str = ""
    job_title: Optional[str] = None
    template_id: Optional[str] = None
    theme_color: Optional[str] = None
    settings: ResumeSettings = Field(default_factory=ResumeSettings)


def ordered_sections(sections: List[ResumeSection]) -> List[ResumeSection]:
    """Sort by order_index; `sorted` is stable so ties keep insertion order."""
    return sorted(sections, key=lambda s: s.order_index)
