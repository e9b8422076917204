from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings
from typing import Literal, Optional
from pathlib import Path


class HostingConfig(BaseModel):
    """Static hosting API configuration.

    The access token is deliberately absent: it is supplied per publish call.
    """
    api_base_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the hosting REST API"
    )
    timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Per-request timeout in seconds"
    )
    branch: str = Field(
        default="main",
        description="Branch the static site is served from"
    )
    entry_path: str = Field(
        default="index.html",
        description="Path of the entry document inside the repository"
    )
    commit_message: str = Field(
        default="Publish portfolio",
        description="Commit message used when uploading the entry document"
    )
    repo_description: str = Field(
        default="Personal portfolio",
        description="Description given to newly created repositories"
    )
    pages_url_template: str = Field(
        default="https://{owner}.github.io/{repo}",
        description="Public URL of a published repository"
    )
    read_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for read-only calls on transport errors"
    )


class DatabaseConfig(BaseModel):
    """Portfolio record store configuration."""
    url: str = Field(
        default="sqlite:///./folio.db",
        description="SQLAlchemy database URL"
    )
    echo: bool = Field(
        default=False,
        description="Log emitted SQL statements"
    )


class RenderConfig(BaseModel):
    """Template renderer configuration."""
    default_template: str = Field(
        default="modern",
        description="Variant used when an unknown template id is requested"
    )
    default_theme_color: str = Field(
        default="#2563EB",
        pattern=r"^#[0-9a-fA-F]{3,8}$",
        description="Accent colour when neither settings nor resume define one"
    )
    policy_path: Optional[Path] = Field(
        default=None,
        description="YAML visibility policy overriding the bundled one"
    )


class AppConfig(BaseSettings):
    """Root application configuration.

    Loads from environment variables with the FOLIO_ prefix.
    Example: FOLIO_HOSTING__TIMEOUT for hosting.timeout
    """
    hosting: HostingConfig = Field(default_factory=HostingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)

    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Where the product serves public pages (GET /{slug})"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level for the API process"
    )
    view_cache_size: int = Field(
        default=10_000,
        ge=1,
        description="Remembered (portfolio, session) pairs for view dedup"
    )

    class Config:
        env_prefix = "FOLIO_"
        env_nested_delimiter = "__"
        env_file = ".env"
        extra = "ignore"
