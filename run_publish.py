"""Publish a résumé JSON file as a portfolio from the command line."""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import SecretStr

load_dotenv()

from folio.core import PublishOrchestrator, TemplateRenderer
from folio.db import build_engine, build_session_factory, init_db
from folio.errors import PersistFailed, PublishError
from folio.models import AppConfig, DisplaySettings, PublishRequest, Resume, ResumeSection
from folio.services import PortfolioStore


def load_request(path: Path, slug: str, template_id: str) -> PublishRequest:
    """Read {"resume": {...}, "sections": [...], "settings": {...}} from disk."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return PublishRequest(
        resume=Resume(**data["resume"]),
        sections=[ResumeSection(**s) for s in data.get("sections", [])],
        template_id=template_id,
        theme_color=data.get("themeColor"),
        slug=slug,
        settings=DisplaySettings(**data.get("settings", {})),
    )


async def run_publish(args: argparse.Namespace) -> int:
    token = os.getenv("FOLIO_HOSTING_TOKEN", "")
    if not token:
        print("❌ Set FOLIO_HOSTING_TOKEN to a hosting access token")
        return 1

    config = AppConfig()
    engine = build_engine(config.database)
    init_db(engine)
    store = PortfolioStore(build_session_factory(engine))

    request = load_request(Path(args.resume), args.slug, args.template)

    print("=" * 60)
    print("FOLIO - Publish")
    print("=" * 60)
    print(f"\n📄 Resume: {request.resume.title or request.resume.id}")
    print(f"🔗 Slug: {request.slug}")
    print(f"🎨 Template: {request.template_id}")
    print("\n" + "=" * 60)

    orchestrator = PublishOrchestrator(
        config,
        store,
        TemplateRenderer(config.render),
        on_progress=lambda p: print(f"   {p.status_text}") if p.status_text else None,
    )

    try:
        result = await orchestrator.publish(request, SecretStr(token))
    except PersistFailed as e:
        print(f"\n⚠️  Site is live at {e.deployment.url if e.deployment else '?'} but was not recorded: {e.reason}")
        return 2
    except PublishError as e:
        print(f"\n❌ Publish failed at {e.step}: {e.reason}")
        if e.retryable:
            print("   This step can be retried by publishing again.")
        return 1
    finally:
        engine.dispose()

    print("\n✅ PUBLISHED\n")
    print(f"🌐 URL: {result.url}")
    print(f"📦 Repository: {result.repo}")
    print(f"🆔 Portfolio: {result.portfolio.id}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("resume", help="Path to a résumé JSON file")
    parser.add_argument("--slug", required=True, help="Public URL slug")
    parser.add_argument("--template", default="modern", help="Layout variant")
    return asyncio.run(run_publish(parser.parse_args()))


if __name__ == "__main__":
    sys.exit(main())
