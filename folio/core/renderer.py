"""Template renderer - résumé data to a self-contained portfolio page.

Rendering is pure and deterministic: the same inputs always produce the
same bytes, so redeploys diff cleanly and the preview matches the live
site. Nothing in the output references external resources.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateNotFound
from markupsafe import Markup

from ..models import DisplaySettings, RenderConfig, Resume, ResumeSection, ordered_sections
from .policy import VisibilityPolicy, load_policy
from .sections import MalformedSection, is_known_type, section_view

logger = logging.getLogger(__name__)

VARIANTS = ("modern", "professional", "creative", "minimal", "grid", "glass")
VARIANT_ALIASES = {"minimalist": "minimal"}

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FONT_NAME = re.compile(r"^[A-Za-z0-9 ,-]{1,80}$")
_SAFE_URL = re.compile(r"^(https?://|mailto:)", re.IGNORECASE)
_SAFE_IMAGE = re.compile(r"^(https?://|data:image/(png|jpe?g|gif|webp);base64,)", re.IGNORECASE)


def safe_url(value: Any) -> str:
    """Drop links with schemes other than http(s) and mailto."""
    text = str(value or "").strip()
    return text if _SAFE_URL.match(text) else ""


def safe_image(value: Any) -> str:
    text = str(value or "").strip()
    return text if _SAFE_IMAGE.match(text) else ""


def create_jinja_env() -> Environment:
    """Create the Jinja2 environment for the bundled HTML templates."""
    env = Environment(
        loader=PackageLoader("folio", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["safe_url"] = safe_url
    env.filters["safe_image"] = safe_image
    return env


class TemplateRenderer:
    """Renders portfolio pages for a fixed set of layout variants.

    Each variant provides a page skeleton (`<variant>/page.html.j2`) and may
    override section fragments in `<variant>/sections.html.j2`; any fragment
    it does not define comes from the shared `sections.html.j2`.

    Usage:
        renderer = TemplateRenderer()
        html = renderer.render(resume, sections, "grid", DisplaySettings())
    """

    def __init__(
        self,
        config: Optional[RenderConfig] = None,
        policy: Optional[VisibilityPolicy] = None,
    ):
        self.config = config or RenderConfig()
        self.policy = policy or load_policy(self.config.policy_path)
        self.env = create_jinja_env()
        self._modules: Dict[str, Any] = {}

    def resolve_variant(self, template_id: Optional[str]) -> str:
        """Map a template id to a known variant, falling back to the default."""
        key = (template_id or "").strip().lower()
        key = VARIANT_ALIASES.get(key, key)
        if key in VARIANTS:
            return key
        if key:
            logger.debug(f"Unknown template '{template_id}', using {self.config.default_template}")
        return self.config.default_template

    def theme_color(self, resume: Resume, settings: DisplaySettings) -> str:
        for candidate in (settings.color, resume.theme_color):
            if candidate and _HEX_COLOR.match(candidate.strip()):
                return candidate.strip()
        return self.config.default_theme_color

    def font_family(self, resume: Resume, settings: DisplaySettings) -> Optional[str]:
        for candidate in (settings.font, resume.settings.font):
            if candidate and _FONT_NAME.match(candidate.strip()):
                return candidate.strip()
        return None

    def _sections_module(self, name: str):
        if name not in self._modules:
            try:
                self._modules[name] = self.env.get_template(name).module
            except TemplateNotFound:
                self._modules[name] = None
        return self._modules[name]

    def _fragment_macro(self, variant: str, section_type: str):
        macro_name = f"section_{section_type}" if is_known_type(section_type) else "section_generic"
        for module_name in (f"{variant}/sections.html.j2", "sections.html.j2"):
            module = self._sections_module(module_name)
            macro = getattr(module, macro_name, None) if module is not None else None
            if macro is not None:
                return macro
        return self._sections_module("sections.html.j2").section_generic

    def select_sections(
        self,
        resume: Resume,
        sections: List[ResumeSection],
        settings: DisplaySettings,
    ) -> List[ResumeSection]:
        """Ordered sections that pass the visibility rules."""
        return [
            s for s in ordered_sections(sections)
            if self.policy.allows(
                s.section_type,
                visible_sections=settings.visible_sections,
                hidden_sections=resume.settings.hidden_sections,
            )
        ]

    def render_fragments(
        self,
        variant: str,
        resume: Resume,
        sections: List[ResumeSection],
        settings: DisplaySettings,
    ) -> List[Dict[str, Any]]:
        """Render each visible section, isolating failures to that section."""
        fragments = []
        for section in self.select_sections(resume, sections, settings):
            try:
                view = section_view(section)
                if view is None:
                    continue
                html = self._fragment_macro(variant, view["type"])(view)
            except MalformedSection as e:
                logger.warning(f"Skipping malformed {section.section_type} section {section.id}: {e}")
                continue
            except Exception as e:
                logger.warning(
                    f"Failed to render {section.section_type} section {section.id}: {e!r}"
                )
                continue
            fragments.append({**view, "html": Markup(str(html).strip())})
        return fragments

    def render(
        self,
        resume: Resume,
        sections: List[ResumeSection],
        template_id: Optional[str] = None,
        settings: Optional[DisplaySettings] = None,
    ) -> str:
        """Render the full page for a résumé.

        Args:
            resume: Résumé header data
            sections: Sections in any order; sorted by order_index here
            template_id: Layout variant, unknown ids use the default
            settings: Display options (visible sections, photo, titles)

        Returns:
            A complete HTML document with inline styles and no scripts
        """
        settings = settings or DisplaySettings()
        variant = self.resolve_variant(template_id or resume.template_id)
        fragments = self.render_fragments(variant, resume, sections, settings)

        page_title = (settings.custom_title or resume.title or "My Portfolio").strip()
        context = {
            "resume": resume,
            "settings": settings,
            "variant": variant,
            "fragments": fragments,
            "theme_color": self.theme_color(resume, settings),
            "font_family": self.font_family(resume, settings),
            "page_title": f"{page_title} - Portfolio",
            "display_name": (settings.custom_user or resume.title or "My Portfolio").strip(),
            "headline": (resume.job_title or "Professional").strip(),
            "photo_url": safe_image(settings.photo_url) if settings.show_photo else "",
        }

        template = self.env.get_template(f"{variant}/page.html.j2")
        html = template.render(**context)
        logger.debug(f"Rendered {variant} page for resume {resume.id} with {len(fragments)} sections")
        return html

    def render_not_found(self, slug: str, create_url: str = "/") -> str:
        """Branded page for slugs with no active portfolio."""
        template = self.env.get_template("not_found.html.j2")
        return template.render(
            slug=slug,
            create_url=create_url,
            theme_color=self.config.default_theme_color,
        )
