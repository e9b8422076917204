"""Pydantic models for the portfolio publisher."""

from .resume import Resume, ResumeSection, ResumeSettings, SectionType, ordered_sections
from .portfolio import (
    ContentSnapshot,
    Deployment,
    DisplaySettings,
    Portfolio,
    PublishRequest,
    PublishResult,
    SnapshotConfig,
)
from .config import AppConfig, HostingConfig, DatabaseConfig, RenderConfig

__all__ = [
    "Resume",
    "ResumeSection",
    "ResumeSettings",
    "SectionType",
    "ordered_sections",
    "ContentSnapshot",
    "Deployment",
    "DisplaySettings",
    "Portfolio",
    "PublishRequest",
    "PublishResult",
    "SnapshotConfig",
    "AppConfig",
    "HostingConfig",
    "DatabaseConfig",
    "RenderConfig",
]
