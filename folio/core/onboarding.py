"""Onboarding wizard steps shown before the first résumé is created."""

from enum import Enum
from typing import Dict, Optional


class OnboardingStep(Enum):
    LEVEL = "LEVEL"
    METHOD = "METHOD"
    IMPORT = "IMPORT"
    DONE = "DONE"


class CreationMethod(str, Enum):
    SCRATCH = "scratch"
    IMPORT = "import"


# Forward order when nothing is skipped
_NEXT: Dict[OnboardingStep, OnboardingStep] = {
    OnboardingStep.LEVEL: OnboardingStep.METHOD,
    OnboardingStep.METHOD: OnboardingStep.IMPORT,
    OnboardingStep.IMPORT: OnboardingStep.DONE,
}


def advance(step: OnboardingStep, method: Optional[CreationMethod] = None) -> OnboardingStep:
    """Next step; starting from scratch skips the import step."""
    if step is OnboardingStep.DONE:
        return step
    if step is OnboardingStep.METHOD and method == CreationMethod.SCRATCH:
        return OnboardingStep.DONE
    return _NEXT[step]


def back(step: OnboardingStep, method: Optional[CreationMethod] = None) -> OnboardingStep:
    """Previous step, mirroring `advance` for the same method."""
    if step is OnboardingStep.LEVEL:
        return step
    if step is OnboardingStep.DONE:
        return OnboardingStep.METHOD if method == CreationMethod.SCRATCH else OnboardingStep.IMPORT
    if step is OnboardingStep.IMPORT:
        return OnboardingStep.METHOD
    return OnboardingStep.LEVEL
