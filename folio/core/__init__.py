"""Core publishing logic for Folio."""

from .pipeline import PublishOrchestrator, PublishState
from .progress import PublishProgress, Stage
from .renderer import TemplateRenderer
from .resolver import PublicResolver, RenderedPage
from .slugs import SlugRegistry, normalize
from .views import ViewRecorder
from .onboarding import CreationMethod, OnboardingStep, advance, back
from .policy import VisibilityPolicy, load_policy

__all__ = [
    "PublishOrchestrator",
    "PublishState",
    "PublishProgress",
    "Stage",
    "TemplateRenderer",
    "PublicResolver",
    "RenderedPage",
    "SlugRegistry",
    "normalize",
    "ViewRecorder",
    "CreationMethod",
    "OnboardingStep",
    "advance",
    "back",
    "VisibilityPolicy",
    "load_policy",
]
