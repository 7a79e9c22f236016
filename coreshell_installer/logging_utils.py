from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Any, List, Optional, Sequence

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

logger = logging.getLogger(__name__)


def configure_logging(
    log_path: str,
    level: int = logging.DEBUG,
    also_console: bool = False,
) -> str:
    """Configure logging for one run.

    Every record goes to the per-run log file. Console mirroring is opt-in
    (``--verbose``) and never shows captured command output, which is logged
    at DEBUG.

    Notes:
    - If the requested directory is not writable we fall back to a file in the
      current working directory, and the fallback path is returned.
    - Calling this again (a second run in the same process) replaces the
      handlers installed by the previous call.

    Returns the actual file path being used.
    """

    root = logging.getLogger()
    root.setLevel(level)

    for h in getattr(root, "_coreshell_handlers", []):
        root.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    handlers: list[logging.Handler] = []

    chosen_path = log_path
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        chosen_path = str(Path.cwd() / os.path.basename(log_path))
        file_handler = logging.FileHandler(chosen_path, encoding="utf-8")
    file_handler.setFormatter(fmt)
    file_handler.setLevel(level)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setFormatter(fmt)
        console.setLevel(logging.INFO)
        handlers.append(console)

    for h in handlers:
        root.addHandler(h)

    setattr(root, "_coreshell_handlers", handlers)

    logger.info("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    return chosen_path


class EventKind(str, Enum):
    START = "start"
    INFO = "info"
    SUCCESS = "success"
    FAILURE = "failure"
    SKIP = "skip"


@dataclass(frozen=True)
class LogEvent:
    timestamp: str
    step: str
    kind: EventKind
    message: str
    output: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        e: Dict[str, Any] = {
            "ts": self.timestamp,
            "step": self.step,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.output:
            e["output"] = self.output
        return e


Listener = Callable[[LogEvent], None]


@dataclass
class EventLog:
    """Append-only record of everything that happened during a run.

    Events are kept in memory in chronological order, written through
    ``logging`` and, when ``jsonl_path`` is set, appended as JSON lines next
    to the text log.
    """

    jsonl_path: Optional[Path] = None
    listeners: List[Listener] = field(default_factory=list)
    events: List[LogEvent] = field(default_factory=list)

    def emit(self, step: str, kind: EventKind, message: str, output: Optional[str] = None) -> LogEvent:
        event = LogEvent(
            timestamp=datetime.now().astimezone().isoformat(timespec="seconds"),
            step=step,
            kind=kind,
            message=message,
            output=output,
        )
        self.events.append(event)

        log = logging.getLogger("coreshell_installer.events")
        level = logging.ERROR if kind is EventKind.FAILURE else logging.INFO
        log.log(level, "[%s] %s: %s", step, kind.value.upper(), message)
        if output:
            log.debug("[%s] OUTPUT\n%s", step, output.rstrip())

        if self.jsonl_path is not None:
            self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
            with self.jsonl_path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(event.as_dict(), sort_keys=True) + "\n")

        for listener in self.listeners:
            listener(event)
        return event

    def start(self, step: str, message: str) -> LogEvent:
        return self.emit(step, EventKind.START, message)

    def info(self, step: str, message: str, output: Optional[str] = None) -> LogEvent:
        return self.emit(step, EventKind.INFO, message, output)

    def success(self, step: str, message: str) -> LogEvent:
        return self.emit(step, EventKind.SUCCESS, message)

    def failure(self, step: str, message: str) -> LogEvent:
        return self.emit(step, EventKind.FAILURE, message)

    def skip(self, step: str, message: str) -> LogEvent:
        return self.emit(step, EventKind.SKIP, message)

    def for_step(self, step: str) -> List[LogEvent]:
        return [e for e in self.events if e.step == step]

    def kinds(self, step: str) -> Sequence[EventKind]:
        return [e.kind for e in self.for_step(step)]
