"""Section normalization - opaque section payloads to template-ready data.

Section content comes from the editor in loosely defined shapes (field
names drifted over time, lists sometimes wrapped in {"items": [...]}).
Each normalizer accepts those variants and raises MalformedSection for
anything it cannot interpret; the renderer drops that one section.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from ..models import ResumeSection, SectionType

logger = logging.getLogger(__name__)


class MalformedSection(ValueError):
    """Section content does not match the shape its type expects."""
    pass


def _items(content: Any) -> List[Any]:
    if content is None:
        return []
    if isinstance(content, list):
        return content
    if isinstance(content, dict):
        items = content.get("items", [])
        if isinstance(items, list):
            return items
    raise MalformedSection(f"expected a list of items, got {type(content).__name__}")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        raise MalformedSection("expected text, got a boolean")
    if isinstance(value, (str, int, float)):
        return str(value).strip()
    raise MalformedSection(f"expected text, got {type(value).__name__}")


def _first(entry: Dict[str, Any], *keys: str) -> str:
    """First non-empty text value among alternative field names."""
    for key in keys:
        text = _text(entry.get(key))
        if text:
            return text
    return ""


def _entries(content: Any) -> List[Dict[str, Any]]:
    entries = _items(content)
    for entry in entries:
        if not isinstance(entry, dict):
            raise MalformedSection(f"expected an object per entry, got {type(entry).__name__}")
    return entries


def _body_text(content: Any) -> str:
    if isinstance(content, dict):
        return _first(content, "text", "summary", "content", "description")
    return _text(content)


def normalize_summary(content: Any) -> Optional[Dict[str, Any]]:
    text = _body_text(content)
    return {"text": text} if text else None


def normalize_experience(content: Any) -> Optional[Dict[str, Any]]:
    items = []
    for entry in _entries(content):
        item = {
            "role": _first(entry, "title", "position", "role"),
            "company": _first(entry, "company", "organization", "employer"),
            "location": _first(entry, "location"),
            "start": _first(entry, "startDate", "start_date", "start"),
            "end": _first(entry, "endDate", "end_date", "end") or "Present",
            "description": _first(entry, "description", "summary"),
            "highlights": [_text(h) for h in _items(entry.get("highlights") or entry.get("responsibilities"))],
        }
        if item["role"] or item["company"]:
            items.append(item)
    return {"items": items} if items else None


def normalize_education(content: Any) -> Optional[Dict[str, Any]]:
    items = []
    for entry in _entries(content):
        item = {
            "degree": _first(entry, "degree", "qualification", "title"),
            "field": _first(entry, "field", "fieldOfStudy", "major"),
            "institution": _first(entry, "institution", "school", "university"),
            "start": _first(entry, "startDate", "start_date", "start"),
            "end": _first(entry, "endDate", "end_date", "end", "graduationDate"),
            "description": _first(entry, "description", "grade", "gpa"),
        }
        if item["degree"] or item["institution"]:
            items.append(item)
    return {"items": items} if items else None


def normalize_skills(content: Any) -> Optional[Dict[str, Any]]:
    skills = []
    for entry in _items(content):
        if isinstance(entry, dict):
            name = _first(entry, "name", "skill", "title")
        else:
            name = _text(entry)
        if name:
            skills.append(name)
    return {"items": skills} if skills else None


def normalize_projects(content: Any) -> Optional[Dict[str, Any]]:
    items = []
    for entry in _entries(content):
        technologies = entry.get("technologies") or entry.get("stack") or []
        if isinstance(technologies, str):
            technologies = [t.strip() for t in technologies.split(",")]
        item = {
            "title": _first(entry, "title", "name") or "Project",
            "description": _first(entry, "description", "summary"),
            "url": _first(entry, "url", "link", "github"),
            "technologies": [t for t in (_text(t) for t in _items(technologies)) if t],
        }
        items.append(item)
    return {"items": items} if items else None


def normalize_certifications(content: Any) -> Optional[Dict[str, Any]]:
    items = []
    for entry in _entries(content):
        item = {
            "name": _first(entry, "name", "title"),
            "issuer": _first(entry, "issuer", "organization", "authority"),
            "date": _first(entry, "date", "issueDate", "year"),
        }
        if item["name"]:
            items.append(item)
    return {"items": items} if items else None


def normalize_languages(content: Any) -> Optional[Dict[str, Any]]:
    items = []
    for entry in _items(content):
        if isinstance(entry, dict):
            item = {
                "name": _first(entry, "name", "language"),
                "level": _first(entry, "proficiency", "level"),
            }
        else:
            item = {"name": _text(entry), "level": ""}
        if item["name"]:
            items.append(item)
    return {"items": items} if items else None


def normalize_achievements(content: Any) -> Optional[Dict[str, Any]]:
    items = []
    for entry in _items(content):
        if isinstance(entry, dict):
            item = {"title": _first(entry, "title", "name"), "description": _first(entry, "description")}
        else:
            item = {"title": _text(entry), "description": ""}
        if item["title"] or item["description"]:
            items.append(item)
    return {"items": items} if items else None


def normalize_personal_info(content: Any) -> Optional[Dict[str, Any]]:
    if content is None:
        return None
    if not isinstance(content, dict):
        raise MalformedSection(f"expected contact details object, got {type(content).__name__}")
    info = {
        "name": _first(content, "fullName", "full_name", "name"),
        "email": _first(content, "email"),
        "phone": _first(content, "phone"),
        "location": _first(content, "location", "address"),
        "linkedin": _first(content, "linkedin", "linkedIn"),
        "website": _first(content, "website", "portfolio", "url"),
    }
    return info if any(info.values()) else None


def normalize_declaration(content: Any) -> Optional[Dict[str, Any]]:
    return normalize_summary(content)


def normalize_custom(content: Any) -> Optional[Dict[str, Any]]:
    if isinstance(content, dict) and "items" in content:
        items = [_text(i) if not isinstance(i, dict) else _first(i, "title", "name", "text") for i in _items(content)]
        items = [i for i in items if i]
        text = _first(content, "text", "description")
        return {"text": text, "items": items} if (items or text) else None
    text = _body_text(content)
    return {"text": text, "items": []} if text else None


def stringify(content: Any) -> str:
    """Stable text form of an arbitrary payload for the generic fragment."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content.strip()
    return json.dumps(content, sort_keys=True, indent=2, ensure_ascii=False, default=str)


def normalize_generic(content: Any) -> Optional[Dict[str, Any]]:
    text = stringify(content)
    return {"text": text} if text else None


NORMALIZERS: Dict[str, Callable[[Any], Optional[Dict[str, Any]]]] = {
    SectionType.SUMMARY.value: normalize_summary,
    SectionType.EXPERIENCE.value: normalize_experience,
    SectionType.EDUCATION.value: normalize_education,
    SectionType.SKILLS.value: normalize_skills,
    SectionType.PROJECTS.value: normalize_projects,
    SectionType.CERTIFICATIONS.value: normalize_certifications,
    SectionType.LANGUAGES.value: normalize_languages,
    SectionType.ACHIEVEMENTS.value: normalize_achievements,
    SectionType.PERSONAL_INFO.value: normalize_personal_info,
    SectionType.DECLARATION.value: normalize_declaration,
    SectionType.CUSTOM.value: normalize_custom,
}

DEFAULT_TITLES: Dict[str, str] = {
    SectionType.SUMMARY.value: "About",
    SectionType.EXPERIENCE.value: "Experience",
    SectionType.EDUCATION.value: "Education",
    SectionType.SKILLS.value: "Skills",
    SectionType.PROJECTS.value: "Projects",
    SectionType.CERTIFICATIONS.value: "Certifications",
    SectionType.LANGUAGES.value: "Languages",
    SectionType.ACHIEVEMENTS.value: "Achievements",
    SectionType.PERSONAL_INFO.value: "Contact",
    SectionType.DECLARATION.value: "Declaration",
}


def is_known_type(section_type: str) -> bool:
    return section_type in NORMALIZERS


def section_view(section: ResumeSection) -> Optional[Dict[str, Any]]:
    """Template context for one section, or None when it has nothing to show.

    Raises:
        MalformedSection: content cannot be interpreted for its type.
    """
    section_type = section.section_type
    normalizer = NORMALIZERS.get(section_type, normalize_generic)
    data = normalizer(section.content)
    if data is None:
        return None

    return {
        "type": section_type,
        "anchor": f"section-{section.id}",
        "title": section.title.strip() or DEFAULT_TITLES.get(section_type, section_type.replace("_", " ").title()),
        "data": data,
    }
