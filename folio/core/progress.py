"""Publish progress as an immutable value with a pure transition function.

The UI renders progress from `PublishProgress` alone; the orchestrator
produces new values through `transition` and `fail` instead of mutating
shared state.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Stage(Enum):
    """Publish stages in execution order."""
    IDLE = "IDLE"
    AUTHENTICATING = "AUTHENTICATING"
    CREATING_REPO = "CREATING_REPO"
    UPLOADING_CONTENT = "UPLOADING_CONTENT"
    ENABLING_HOSTING = "ENABLING_HOSTING"
    PERSISTING_RECORD = "PERSISTING_RECORD"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# Stage transition map: current -> next
TRANSITIONS: Dict[Stage, Stage] = {
    Stage.IDLE: Stage.AUTHENTICATING,
    Stage.AUTHENTICATING: Stage.CREATING_REPO,
    Stage.CREATING_REPO: Stage.UPLOADING_CONTENT,
    Stage.UPLOADING_CONTENT: Stage.ENABLING_HOSTING,
    Stage.ENABLING_HOSTING: Stage.PERSISTING_RECORD,
    Stage.PERSISTING_RECORD: Stage.COMPLETED,
}

TERMINAL = frozenset({Stage.COMPLETED, Stage.FAILED})

STATUS_TEXT: Dict[Stage, str] = {
    Stage.IDLE: "",
    Stage.AUTHENTICATING: "Checking credentials...",
    Stage.CREATING_REPO: "Creating repository...",
    Stage.UPLOADING_CONTENT: "Uploading files...",
    Stage.ENABLING_HOSTING: "Enabling hosting...",
    Stage.PERSISTING_RECORD: "Saving details...",
    Stage.COMPLETED: "Published",
    Stage.FAILED: "Publishing failed",
}


class StageFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: str
    reason: str
    retryable: bool = False


class PublishProgress(BaseModel):
    """Where a publish currently stands."""
    model_config = ConfigDict(frozen=True)

    stage: Stage = Stage.IDLE
    completed: Tuple[str, ...] = ()
    failure: Optional[StageFailure] = None

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL

    @property
    def status_text(self) -> str:
        return STATUS_TEXT[self.stage]


class InvalidTransition(ValueError):
    pass


def transition(progress: PublishProgress) -> PublishProgress:
    """Advance to the next stage, marking the current one completed."""
    next_stage = TRANSITIONS.get(progress.stage)
    if next_stage is None:
        raise InvalidTransition(f"No transition defined from {progress.stage.name}")

    completed = progress.completed
    if progress.stage is not Stage.IDLE:
        completed = completed + (progress.stage.name,)
    return progress.model_copy(update={"stage": next_stage, "completed": completed})


def fail(progress: PublishProgress, reason: str, retryable: bool = False) -> PublishProgress:
    """Move to FAILED, recording the stage that failed."""
    if progress.is_terminal:
        raise InvalidTransition(f"Cannot fail from terminal stage {progress.stage.name}")
    failure = StageFailure(step=progress.stage.name, reason=reason, retryable=retryable)
    return progress.model_copy(update={"stage": Stage.FAILED, "failure": failure})
