"""Shared fixtures: in-memory database, fake hosting API, sample résumé."""

import itertools
from typing import Dict, List, Optional, Tuple

import pytest

from folio.core import TemplateRenderer
from folio.db import build_engine, build_session_factory, init_db
from folio.models import (
    AppConfig,
    DatabaseConfig,
    Resume,
    ResumeSection,
    ResumeSettings,
)
from folio.services import (
    HostingAPIError,
    HostingErrorKind,
    HostingIdentity,
    HostingRepository,
    HostingStatus,
    PortfolioStore,
)


class FakeHosting:
    """In-memory HostingAPI.

    `fail[method]` holds an error raised by the next call to that method.
    """

    def __init__(self, login: str = "jane"):
        self.login = login
        self.repos: Dict[str, HostingRepository] = {}
        self.files: Dict[Tuple[str, str], Tuple[str, str]] = {}
        self.pages = set()
        self.calls: List[str] = []
        self.uploads: List[Dict[str, Optional[str]]] = []
        self.fail: Dict[str, HostingAPIError] = {}
        self._ids = itertools.count(1)

    def _enter(self, method: str) -> None:
        self.calls.append(method)
        if method in self.fail:
            raise self.fail.pop(method)

    async def get_identity(self) -> HostingIdentity:
        self._enter("get_identity")
        return HostingIdentity(id=42, login=self.login)

    async def create_repository(self, name: str, description: str) -> HostingRepository:
        self._enter("create_repository")
        if name in self.repos:
            raise HostingAPIError(HostingErrorKind.ALREADY_EXISTS, f"Repository {name} already exists", 422)
        repo = HostingRepository(id=next(self._ids), name=name, owner=self.login, default_branch="main")
        self.repos[name] = repo
        return repo

    async def get_repository(self, owner: str, name: str) -> HostingRepository:
        self._enter("get_repository")
        if name not in self.repos:
            raise HostingAPIError(HostingErrorKind.NOT_FOUND, "Not Found", 404)
        return self.repos[name]

    async def get_file_version(self, owner: str, repo: str, path: str) -> Optional[str]:
        self._enter("get_file_version")
        entry = self.files.get((repo, path))
        return entry[0] if entry else None

    async def upsert_file(self, owner, repo, path, content_base64, message, version_token=None) -> str:
        self._enter("upsert_file")
        current = self.files.get((repo, path))
        if (current[0] if current else None) != version_token:
            raise HostingAPIError(HostingErrorKind.CONFLICT, f"{path} does not match {version_token}", 409)
        new_token = f"sha-{next(self._ids)}"
        self.files[(repo, path)] = (new_token, content_base64)
        self.uploads.append({"repo": repo, "path": path, "version_token": version_token})
        return new_token

    async def enable_static_hosting(self, owner: str, repo: str, branch: str) -> HostingStatus:
        self._enter("enable_static_hosting")
        if repo in self.pages:
            return HostingStatus.ALREADY_ENABLED
        self.pages.add(repo)
        return HostingStatus.ENABLED


class FakeHostingFactory:
    """Stands in for GitHubHostingService(config, token) as an async context manager."""

    def __init__(self, hosting: FakeHosting):
        self.hosting = hosting
        self.credentials = []

    def __call__(self, config, credential):
        self.credentials.append(credential)
        return self

    async def __aenter__(self) -> FakeHosting:
        return self.hosting

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(database=DatabaseConfig(url="sqlite://"))


@pytest.fixture
def engine(config):
    engine = build_engine(config.database)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> PortfolioStore:
    return PortfolioStore(build_session_factory(engine))


@pytest.fixture
def renderer(config) -> TemplateRenderer:
    return TemplateRenderer(config.render)


@pytest.fixture
def hosting() -> FakeHosting:
    return FakeHosting()


@pytest.fixture
def hosting_factory(hosting) -> FakeHostingFactory:
    return FakeHostingFactory(hosting)


@pytest.fixture
def resume() -> Resume:
    return Resume(
        id="resume-1",
        user_id="user-1",
        title="Jane Doe",
        job_title="Backend Engineer",
        template_id="modern",
        theme_color="#0F766E",
        settings=ResumeSettings(),
    )


@pytest.fixture
def sections() -> List[ResumeSection]:
    return [
        ResumeSection(
            id="s-exp",
            resume_id="resume-1",
            section_type="experience",
            title="Experience",
            order_index=2,
            content=[
                {
                    "title": "Senior Engineer",
                    "company": "Acme",
                    "startDate": "2021",
                    "description": "Built the billing platform",
                    "highlights": ["Cut p99 latency by 40%"],
                }
            ],
        ),
        ResumeSection(
            id="s-summary",
            resume_id="resume-1",
            section_type="summary",
            title="About",
            order_index=1,
            content={"text": "Engineer who likes boring infrastructure."},
        ),
        ResumeSection(
            id="s-skills",
            resume_id="resume-1",
            section_type="skills",
            title="Skills",
            order_index=3,
            content={"items": ["Python", "PostgreSQL", {"name": "Kubernetes"}]},
        ),
        ResumeSection(
            id="s-decl",
            resume_id="resume-1",
            section_type="declaration",
            title="Declaration",
            order_index=4,
            content={"text": "I hereby declare the above is true."},
        ),
    ]
