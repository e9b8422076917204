"""Template renderer tests: determinism, filtering, isolation and variants."""

import re

import pytest

import folio.core
from folio.core import TemplateRenderer, VisibilityPolicy
from folio.core.renderer import VARIANTS
from folio.models import DisplaySettings, RenderConfig, ResumeSection, ResumeSettings


def section_types(html):
    return re.findall(r'data-section-type="([a-z_]+)"', html)


def test_render_is_deterministic(renderer, resume, sections):
    first = renderer.render(resume, sections, "modern", DisplaySettings())
    second = renderer.render(resume, sections, "modern", DisplaySettings())

    assert first == second


def test_sections_follow_order_index(renderer, resume, sections):
    html = renderer.render(resume, sections, "modern")

    assert section_types(html) == ["summary", "experience", "skills"]


def test_declaration_excluded_by_default(renderer, resume, sections):
    html = renderer.render(resume, sections, "modern")

    assert "declaration" not in section_types(html)
    assert "I hereby declare" not in html


def test_visible_sections_filter(renderer, resume, sections):
    settings = DisplaySettings(visibleSections=["skills", "declaration"])

    html = renderer.render(resume, sections, "modern", settings)

    assert section_types(html) == ["skills", "declaration"]


def test_hidden_sections_from_resume_settings(renderer, resume, sections):
    hidden = resume.model_copy(update={"settings": ResumeSettings(hiddenSections=["experience"])})

    html = renderer.render(hidden, sections, "modern")

    assert "experience" not in section_types(html)


def test_never_public_overrides_visible_sections(resume, sections):
    renderer = TemplateRenderer(policy=VisibilityPolicy(never_public=["skills"]))

    html = renderer.render(resume, sections, "modern", DisplaySettings(visibleSections=["skills", "summary"]))

    assert section_types(html) == ["summary"]


def test_malformed_section_is_skipped(renderer, resume, sections):
    broken = ResumeSection(
        id="s-broken",
        section_type="experience",
        title="Broken",
        order_index=0,
        content=["not an object"],
    )

    html = renderer.render(resume, [broken] + sections, "modern")

    assert "section-s-broken" not in html
    assert section_types(html) == ["summary", "experience", "skills"]


def test_empty_sections_are_omitted(renderer, resume):
    empty = [
        ResumeSection(id="e1", section_type="skills", content=[]),
        ResumeSection(id="e2", section_type="summary", content={"text": "   "}),
    ]

    html = renderer.render(resume, empty, "modern")

    assert section_types(html) == []


def test_unknown_type_uses_generic_fragment(renderer, resume):
    odd = ResumeSection(
        id="s-odd",
        section_type="volunteering",
        title="",
        order_index=1,
        content={"org": "Food Bank", "hours": 40},
    )

    html = renderer.render(resume, [odd], "modern")

    assert 'data-section-type="volunteering"' in html
    assert "generic-content" in html
    assert "Food Bank" in html
    assert ">Volunteering</h2>" in html


def test_content_is_escaped(renderer, resume):
    hostile = ResumeSection(
        id="s-xss",
        section_type="summary",
        content={"text": "<script>alert(1)</script>"},
    )

    html = renderer.render(resume, [hostile], "modern")

    assert "<script>" not in html
    assert "&lt;script&gt;" in html


def test_unsafe_links_are_dropped(renderer, resume):
    project = ResumeSection(
        id="s-proj",
        section_type="projects",
        content=[
            {"title": "Safe", "url": "https://example.com/safe"},
            {"title": "Sneaky", "url": "javascript:alert(1)"},
        ],
    )

    html = renderer.render(resume, [project], "modern")

    assert 'href="https://example.com/safe"' in html
    assert "javascript:" not in html


def test_output_is_self_contained(renderer, resume, sections):
    for variant in VARIANTS:
        html = renderer.render(resume, sections, variant)
        assert "<script" not in html
        assert '<link rel="stylesheet"' not in html


@pytest.mark.parametrize("variant", VARIANTS)
def test_every_variant_renders_all_fragments(renderer, resume, sections, variant):
    html = renderer.render(resume, sections, variant)

    assert f'class="variant-{variant}"' in html
    # Sidebar layouts may move some fragments ahead of the main column
    assert sorted(section_types(html)) == ["experience", "skills", "summary"]
    assert "Senior Engineer" in html
    assert "Kubernetes" in html


def test_unknown_template_falls_back_to_default(renderer, resume, sections):
    assert renderer.resolve_variant("neon") == "modern"
    assert renderer.resolve_variant("minimalist") == "minimal"
    assert renderer.render(resume, sections, "neon") == renderer.render(resume, sections, "modern")


def test_theme_color_precedence(renderer, resume):
    assert renderer.theme_color(resume, DisplaySettings(color="#ff0000")) == "#ff0000"
    assert renderer.theme_color(resume, DisplaySettings()) == "#0F766E"
    assert renderer.theme_color(resume, DisplaySettings(color="red; background: url(x)")) == "#0F766E"

    plain = resume.model_copy(update={"theme_color": None})
    assert renderer.theme_color(plain, DisplaySettings()) == RenderConfig().default_theme_color


def test_custom_titles_and_photo(renderer, resume, sections):
    settings = DisplaySettings(
        customTitle="Jane's Work",
        customUser="J. Doe",
        showPhoto=True,
        photoUrl="https://example.com/me.png",
    )

    html = renderer.render(resume, sections, "modern", settings)

    assert "<title>Jane&#39;s Work - Portfolio</title>" in html
    assert "J. Doe" in html
    assert 'src="https://example.com/me.png"' in html


def test_photo_hidden_unless_enabled(renderer, resume, sections):
    settings = DisplaySettings(photoUrl="https://example.com/me.png")

    html = renderer.render(resume, sections, "modern", settings)

    assert "me.png" not in html


def test_not_found_page(renderer):
    html = renderer.render_not_found("ghost", create_url="https://folio.example/")

    assert 'data-page="not-found"' in html
    assert "/ghost" in html
    assert 'href="https://folio.example/"' in html


def test_core_exports_resolve():
    missing = [name for name in folio.core.__all__ if not hasattr(folio.core, name)]

    assert missing == []
    assert "TemplateRenderer" in folio.core.__all__
