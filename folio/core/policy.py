"""Visibility policy - which section types reach public pages.

Loads a YAML table so the default exclusions can change without a code
release.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

BUNDLED_POLICY = Path(__file__).resolve().parent.parent / "policy.yaml"


class VisibilityPolicy(BaseModel):
    """Section types filtered out of public output."""
    excluded_by_default: List[str] = Field(
        default_factory=lambda: ["declaration"],
        description="Dropped when the portfolio does not list visible sections"
    )
    never_public: List[str] = Field(
        default_factory=list,
        description="Dropped even when listed as visible"
    )

    def allows(
        self,
        section_type: str,
        visible_sections: Optional[Iterable[str]] = None,
        hidden_sections: Iterable[str] = (),
    ) -> bool:
        """Decide whether a section of this type is rendered.

        Args:
            section_type: Type of the candidate section
            visible_sections: Explicit allow-list from display settings
            hidden_sections: Types the owner hid in the editor
        """
        if section_type in self.never_public or section_type in hidden_sections:
            return False
        if visible_sections is not None:
            return section_type in visible_sections
        return section_type not in self.excluded_by_default


def load_policy(path: Optional[Path] = None) -> VisibilityPolicy:
    """Load the policy table from YAML, falling back to the bundled file."""
    path = path or BUNDLED_POLICY

    if not path.exists():
        logger.warning(f"Visibility policy not found: {path}, using defaults")
        return VisibilityPolicy()

    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    policy = VisibilityPolicy(**raw)
    logger.debug(
        f"Loaded visibility policy from {path}: "
        f"excluded={policy.excluded_by_default}, never_public={policy.never_public}"
    )
    return policy
