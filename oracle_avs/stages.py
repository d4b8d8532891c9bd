from __future__ import annotations

from enum import Enum
from typing import List

import bittensor as bt


class TaskStage(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    COMPUTING = "computing"
    SIGNING = "signing"
    SCORING = "scoring"
    SUBMITTING = "submitting"
    DONE = "done"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STAGES = frozenset({TaskStage.SUCCEEDED, TaskStage.FAILED})


class StageTracker:
    """Per-request progress record. The first failure is terminal; there is no retry edge."""

    def __init__(self, label: str) -> None:
        self.label = label
        self.stage = TaskStage.IDLE
        self.failed_at: TaskStage | None = None
        self.history: List[TaskStage] = [TaskStage.IDLE]

    def advance(self, stage: TaskStage) -> None:
        if self.stage in TERMINAL_STAGES:
            raise RuntimeError(f"[{self.label}] cannot leave terminal stage {self.stage.value}")
        bt.logging.debug(f"[{self.label}] {self.stage.value} -> {stage.value}")
        self.stage = stage
        self.history.append(stage)

    def succeed(self) -> None:
        self.advance(TaskStage.SUCCEEDED)

    def fail(self, exc: BaseException) -> None:
        self.failed_at = self.stage
        bt.logging.error(f"[{self.label}] failed during {self.stage.value}: {exc}")
        self.stage = TaskStage.FAILED
        self.history.append(TaskStage.FAILED)
