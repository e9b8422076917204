"""External service integrations."""

from .hosting import (
    GitHubHostingService,
    HostingAPI,
    HostingAPIError,
    HostingErrorKind,
    HostingIdentity,
    HostingRepository,
    HostingStatus,
)
from .portfolio_store import PortfolioStore, PortfolioStoreError

__all__ = [
    "GitHubHostingService",
    "HostingAPI",
    "HostingAPIError",
    "HostingErrorKind",
    "HostingIdentity",
    "HostingRepository",
    "HostingStatus",
    "PortfolioStore",
    "PortfolioStoreError",
]
