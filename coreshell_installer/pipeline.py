from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Protocol, Sequence

from .errors import InstallerError

logger = logging.getLogger(__name__)


class StepStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABORTED = "aborted"


class Step(Protocol):
    """A single idempotent step.

    ``is_satisfied`` is the guard: when it answers True the effect is already
    present and ``run`` is never called. ``run`` raises on failure.
    """

    step_id: str
    title: str
    fatal: bool
    platforms: Optional[FrozenSet[Any]]

    def is_satisfied(self, kit: Any) -> bool:
        ...

    def run(self, kit: Any) -> None:
        ...

    def describe(self, kit: Any) -> Optional[str]:
        ...


@dataclass
class StepRecord:
    step_id: str
    title: str
    fatal: bool
    status: StepStatus = StepStatus.PENDING
    error: Optional[str] = None


@dataclass(frozen=True)
class PipelineResult:
    status: RunStatus
    records: List[StepRecord]

    def _ids(self, status: StepStatus) -> List[str]:
        return [r.step_id for r in self.records if r.status is status]

    @property
    def ran_steps(self) -> List[str]:
        return self._ids(StepStatus.SUCCEEDED)

    @property
    def skipped_steps(self) -> List[str]:
        return self._ids(StepStatus.SKIPPED)

    @property
    def failed_steps(self) -> List[str]:
        return self._ids(StepStatus.FAILED)

    @property
    def pending_steps(self) -> List[str]:
        return self._ids(StepStatus.PENDING)

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def record(self, step_id: str) -> StepRecord:
        for r in self.records:
            if r.step_id == step_id:
                return r
        raise KeyError(step_id)


def select_steps(
    steps: Sequence[Step],
    *,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> List[Step]:
    """Validate the catalog and cut the [start_at, stop_after] slice out of it."""

    ids = [s.step_id for s in steps]
    dupes = sorted({i for i in ids if ids.count(i) > 1})
    if dupes:
        raise ValueError(f"Duplicate step ids: {', '.join(dupes)}")
    for name, sid in (("start_at", start_at), ("stop_after", stop_after)):
        if sid is not None and sid not in ids:
            raise ValueError(f"Unknown step id for {name}: {sid}")
    if not ids:
        return []

    first = ids.index(start_at) if start_at is not None else 0
    last = ids.index(stop_after) if stop_after is not None else len(ids) - 1
    if last < first:
        raise ValueError(f"stop_after {stop_after} comes before start_at {start_at}")
    return list(steps[first : last + 1])


def _applies(step: Step, platform: Any) -> bool:
    platforms = getattr(step, "platforms", None)
    return platforms is None or platform in platforms


def _describe(step: Step, kit: Any) -> None:
    describe = getattr(step, "describe", None)
    if describe is None:
        return
    text = describe(kit)
    if text:
        kit.events.info(step.step_id, text)


def run_pipeline(
    *,
    kit: Any,
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps strictly in order.

    Catalog order is a contract: later steps rely on what earlier ones did
    (package manager before anything installed through it, shell before its
    configuration).
    """

    selected = select_steps(steps, start_at=start_at, stop_after=stop_after)
    records = [StepRecord(step_id=s.step_id, title=s.title, fatal=s.fatal) for s in selected]
    events = kit.events
    status = RunStatus.IN_PROGRESS

    for step, rec in zip(selected, records):
        if not _applies(step, kit.platform):
            rec.status = StepStatus.SKIPPED
            events.skip(step.step_id, f"{step.title}: not applicable on {kit.platform.value}")
            continue

        if step.is_satisfied(kit):
            rec.status = StepStatus.SKIPPED
            events.skip(step.step_id, f"{step.title}: already done")
            _describe(step, kit)
            continue

        rec.status = StepStatus.RUNNING
        events.start(step.step_id, step.title)
        try:
            step.run(kit)
        except (InstallerError, OSError) as e:
            rec.status = StepStatus.FAILED
            rec.error = str(e)
            events.failure(step.step_id, f"{step.title}: {e}")
            if step.fatal:
                logger.error("Fatal step %s failed; aborting run", step.step_id)
                status = RunStatus.ABORTED
                break
            logger.warning("Optional step %s failed; continuing", step.step_id)
            continue

        rec.status = StepStatus.SUCCEEDED
        events.success(step.step_id, step.title)
        _describe(step, kit)

    if status is RunStatus.IN_PROGRESS:
        status = RunStatus.COMPLETED
    return PipelineResult(status=status, records=records)
