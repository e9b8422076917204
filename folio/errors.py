"""Errors raised by the publish pipeline and the slug registry."""

from typing import Optional

from .models import Deployment


class PublishError(Exception):
    """A publish attempt failed at a named step.

    `reason` carries the upstream message verbatim so the caller can show
    targeted error text.
    """
    retryable = False

    def __init__(self, step: str, reason: str):
        super().__init__(f"{step}: {reason}")
        self.step = step
        self.reason = reason


class CredentialInvalid(PublishError):
    """The hosting token was rejected; a new one must be supplied."""

    def __init__(self, reason: str = "Hosting credential rejected"):
        super().__init__("AUTHENTICATING", reason)


class InvalidSlug(PublishError):
    """The slug candidate normalizes to nothing usable."""

    def __init__(self, candidate: str):
        super().__init__("IDLE", f"'{candidate}' is not a valid URL slug")
        self.candidate = candidate


class SlugTaken(PublishError):
    """Another active portfolio already uses the slug."""

    def __init__(self, slug: str, step: str = "IDLE"):
        super().__init__(step, f"The URL '{slug}' is already taken")
        self.slug = slug


class RepoCreateFailed(PublishError):
    retryable = True

    def __init__(self, reason: str):
        super().__init__("CREATING_REPO", reason)


class ContentUploadFailed(PublishError):
    """Upload rejected, e.g. because the version token went stale."""
    retryable = True

    def __init__(self, reason: str):
        super().__init__("UPLOADING_CONTENT", reason)


class HostingNotReady(PublishError):
    """The serving branch has not materialized yet; retry shortly."""
    retryable = True

    def __init__(self, reason: str):
        super().__init__("ENABLING_HOSTING", reason)


class PersistFailed(PublishError):
    """The site is live but the portfolio record could not be written.

    Retry only the persistence step with `deployment`; do not redeploy.
    """
    retryable = True

    def __init__(self, reason: str, deployment: Optional[Deployment] = None):
        super().__init__("PERSISTING_RECORD", reason)
        self.deployment = deployment
