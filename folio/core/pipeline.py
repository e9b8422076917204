"""Publish Orchestrator - deploys a rendered portfolio to static hosting.

Implements a state machine over dependent hosting calls. Every step is
safe to re-run, so a failed publish is resumed by publishing again; the
orchestrator itself never retries a step and never compensates.
"""

import base64
import logging
from typing import AsyncContextManager, Callable, Dict, Optional

from pydantic import BaseModel, SecretStr

from ..errors import (
    ContentUploadFailed,
    CredentialInvalid,
    HostingNotReady,
    PersistFailed,
    PublishError,
    RepoCreateFailed,
    SlugTaken,
)
from ..models import AppConfig, Deployment, HostingConfig, Portfolio, PublishRequest, PublishResult
from ..services import (
    GitHubHostingService,
    HostingAPI,
    HostingAPIError,
    HostingErrorKind,
    HostingRepository,
    HostingStatus,
    PortfolioStore,
)
from .progress import PublishProgress, Stage, fail, transition
from .renderer import TemplateRenderer
from .slugs import SlugRegistry, normalize

logger = logging.getLogger(__name__)

# Builds a hosting client bound to one credential for one publish
HostingFactory = Callable[[HostingConfig, SecretStr], AsyncContextManager[HostingAPI]]
ProgressListener = Callable[[PublishProgress], None]


class PublishState(BaseModel):
    """Traveling context accumulated across publish stages."""
    request: PublishRequest
    slug: str

    owner: Optional[str] = None
    repository: Optional[HostingRepository] = None
    html: Optional[str] = None
    prior_version_token: Optional[str] = None
    version_token: Optional[str] = None
    hosting_status: Optional[HostingStatus] = None
    url: Optional[str] = None
    portfolio: Optional[Portfolio] = None

    def deployment(self) -> Deployment:
        return Deployment(owner=self.owner, repo=self.repository.name, url=self.url)


class PublishOrchestrator:
    """State machine orchestrator for one publish.

    Manages the flow: IDLE → AUTHENTICATING → CREATING_REPO →
    UPLOADING_CONTENT → ENABLING_HOSTING → PERSISTING_RECORD → COMPLETED

    Any stage may end in FAILED; the raised PublishError names the stage.
    The credential is only handed to the hosting client and is never
    stored or logged.

    Usage:
        orchestrator = PublishOrchestrator(config, store, renderer)
        result = await orchestrator.publish(request, SecretStr(token))
    """

    # Stage handlers
    HANDLERS: Dict[Stage, str] = {
        Stage.AUTHENTICATING: "_authenticate",
        Stage.CREATING_REPO: "_create_or_reuse_repo",
        Stage.UPLOADING_CONTENT: "_upload_content",
        Stage.ENABLING_HOSTING: "_enable_hosting",
        Stage.PERSISTING_RECORD: "_persist_record",
    }

    def __init__(
        self,
        config: AppConfig,
        store: PortfolioStore,
        renderer: TemplateRenderer,
        hosting_factory: HostingFactory = GitHubHostingService,
        on_progress: Optional[ProgressListener] = None,
    ):
        self.config = config
        self.store = store
        self.renderer = renderer
        self.slugs = SlugRegistry(store)
        self.hosting_factory = hosting_factory
        self.on_progress = on_progress
        self._progress = PublishProgress()

    @property
    def progress(self) -> PublishProgress:
        return self._progress

    @property
    def current_stage(self) -> Stage:
        return self._progress.stage

    def _set_progress(self, progress: PublishProgress) -> None:
        self._progress = progress
        if self.on_progress is not None:
            self.on_progress(progress)

    def _transition(self) -> None:
        previous = self._progress.stage
        self._set_progress(transition(self._progress))
        logger.debug(f"Transitioning: {previous.name} → {self._progress.stage.name}")

    def _fail(self, error: PublishError) -> None:
        self._set_progress(fail(self._progress, error.reason, error.retryable))
        logger.error(f"Publish failed at {error.step}: {error.reason}")

    def _validate_preconditions(self, request: PublishRequest) -> str:
        """Normalize the slug and reject it before any hosting call is made."""
        slug = normalize(request.slug)
        existing_id = request.existing_portfolio.id if request.existing_portfolio else None

        if not self.slugs.check_availability(slug, exclude_portfolio_id=existing_id):
            raise SlugTaken(slug)
        return slug

    async def _execute_stage(self, state: PublishState, hosting: HostingAPI) -> PublishState:
        """Execute the handler for the current stage."""
        stage = self._progress.stage
        handler = self.HANDLERS.get(stage)

        if handler is None:
            logger.debug(f"No handler for stage {stage.name}, skipping")
            return state

        logger.info(f"Executing stage: {stage.name}")

        try:
            return await getattr(self, handler)(state, hosting)
        except PublishError as e:
            self._fail(e)
            raise
        except Exception as e:
            error = PublishError(stage.name, str(e))
            self._fail(error)
            raise error from e

    async def publish(self, request: PublishRequest, credential: SecretStr) -> PublishResult:
        """Run one sequential publish attempt.

        Args:
            request: Résumé data, layout choices, slug candidate and the
                existing portfolio when republishing
            credential: Hosting access token, used only for this call

        Returns:
            PublishResult with the public url, repository name and record

        Raises:
            InvalidSlug, SlugTaken: before any hosting call
            CredentialInvalid, RepoCreateFailed, ContentUploadFailed,
            HostingNotReady, PublishError: deploy failures, by stage
            PersistFailed: deployed but not recorded; retry `persist` only
        """
        self._set_progress(PublishProgress())

        try:
            slug = self._validate_preconditions(request)
        except PublishError as e:
            self._fail(e)
            raise

        state = PublishState(request=request, slug=slug)
        logger.info(f"Starting publish for resume {request.resume.id} as '{slug}'")

        async with self.hosting_factory(self.config.hosting, credential) as hosting:
            while not self._progress.is_terminal:
                self._transition()
                state = await self._execute_stage(state, hosting)

        logger.info(f"Publish completed: {state.url}")
        return PublishResult(url=state.url, repo=state.repository.name, portfolio=state.portfolio)

    # === Stage handlers ===

    async def _authenticate(self, state: PublishState, hosting: HostingAPI) -> PublishState:
        try:
            identity = await hosting.get_identity()
        except HostingAPIError as e:
            if e.kind is HostingErrorKind.UNAUTHORIZED:
                raise CredentialInvalid(e.detail) from e
            raise PublishError(Stage.AUTHENTICATING.name, e.detail) from e

        logger.info(f"Authenticated as {identity.login}")
        return state.model_copy(update={"owner": identity.login})

    async def _create_or_reuse_repo(self, state: PublishState, hosting: HostingAPI) -> PublishState:
        existing = state.request.existing_portfolio
        name = existing.repo if existing and existing.repo else state.slug

        try:
            repository = await hosting.create_repository(
                name, f"{self.config.hosting.repo_description}: {state.request.resume.title}".strip()
            )
        except HostingAPIError as e:
            if e.kind is not HostingErrorKind.ALREADY_EXISTS:
                raise RepoCreateFailed(e.detail) from e

            logger.info(f"Repository {name} already exists, reusing it")
            try:
                repository = await hosting.get_repository(state.owner, name)
            except HostingAPIError as lookup_error:
                raise RepoCreateFailed(lookup_error.detail) from lookup_error

        return state.model_copy(update={"repository": repository})

    async def _upload_content(self, state: PublishState, hosting: HostingAPI) -> PublishState:
        request = state.request
        html = self.renderer.render(
            request.resume,
            request.sections,
            request.template_id,
            request.settings.with_theme_color(request.theme_color),
        )

        hosting_config = self.config.hosting
        repo = state.repository.name
        content = base64.b64encode(html.encode("utf-8")).decode("ascii")

        try:
            prior = await hosting.get_file_version(state.owner, repo, hosting_config.entry_path)
            new_token = await hosting.upsert_file(
                state.owner,
                repo,
                hosting_config.entry_path,
                content,
                hosting_config.commit_message,
                version_token=prior,
            )
        except HostingAPIError as e:
            raise ContentUploadFailed(e.detail) from e

        logger.info(
            f"Uploaded {hosting_config.entry_path} to {state.owner}/{repo} "
            f"({'update' if prior else 'create'}, {len(html)} chars)"
        )
        return state.model_copy(update={
            "html": html,
            "prior_version_token": prior,
            "version_token": new_token,
        })

    async def _enable_hosting(self, state: PublishState, hosting: HostingAPI) -> PublishState:
        repository = state.repository
        branch = repository.default_branch or self.config.hosting.branch

        try:
            status = await hosting.enable_static_hosting(state.owner, repository.name, branch)
        except HostingAPIError as e:
            if e.kind is HostingErrorKind.NOT_READY:
                raise HostingNotReady(
                    f"{e.detail}. The repository is still initializing, try again in a few seconds."
                ) from e
            raise PublishError(Stage.ENABLING_HOSTING.name, e.detail) from e

        if status is HostingStatus.ALREADY_ENABLED:
            logger.info(f"Hosting already enabled for {state.owner}/{repository.name}")

        existing = state.request.existing_portfolio
        url = (
            existing.url if existing and existing.url
            else self.config.hosting.pages_url_template.format(owner=state.owner, repo=repository.name)
        )
        return state.model_copy(update={"hosting_status": status, "url": url})

    async def _persist_record(self, state: PublishState, hosting: HostingAPI) -> PublishState:
        portfolio = self.persist(state.request, state.deployment(), slug=state.slug)
        return state.model_copy(update={"portfolio": portfolio})

    # === Persistence retry ===

    def persist(
        self,
        request: PublishRequest,
        deployment: Deployment,
        slug: Optional[str] = None,
    ) -> Portfolio:
        """Write the portfolio record for an already deployed site.

        Called as the last publish stage and on its own to retry after
        PersistFailed, without touching the hosting service.

        Raises:
            SlugTaken: the slug was claimed since the availability check
            PersistFailed: any other storage failure
        """
        slug = slug or normalize(request.slug)
        existing = request.existing_portfolio

        try:
            return self.store.save_published(
                portfolio_id=existing.id if existing else None,
                resume_id=request.resume.id,
                title=request.resume.title,
                slug=slug,
                repo=deployment.repo,
                url=deployment.url,
                template_id=self.renderer.resolve_variant(request.template_id),
                theme_color=request.theme_color,
                settings=request.settings,
                content=request.snapshot(),
            )
        except SlugTaken:
            raise
        except Exception as e:
            raise PersistFailed(str(e), deployment) from e
