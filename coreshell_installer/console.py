from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from rich.console import Console
from rich.prompt import Confirm
from rich.text import Text

from .logging_utils import EventKind, LogEvent


class ConsoleReporter:
    """Operator-facing output.

    Renders step events as short colored lines. Captured command output only
    ever goes to the log file; on failure the operator is pointed there.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False)
        self._numbers: Dict[str, int] = {}
        self._titles: Dict[str, str] = {}
        self._fatal: Dict[str, bool] = {}
        self._total = 0
        self._announced: set[str] = set()

    def plan(self, steps: Sequence) -> None:
        self._numbers = {s.step_id: i for i, s in enumerate(steps, start=1)}
        self._titles = {s.step_id: s.title for s in steps}
        self._fatal = {s.step_id: bool(s.fatal) for s in steps}
        self._total = len(steps)
        self._announced = set()

    # -- building blocks ----------------------------------------------------

    def title(self, text: str) -> None:
        width = len(text) + 4
        self.console.print(Text("▁" * width, style="yellow"))
        self.console.print(Text(f"█ {text} █", style="yellow"))
        self.console.print(Text("▔" * width, style="yellow"))

    def header(self, text: str) -> None:
        self.console.print()
        self.console.print(Text(f"█ {text}", style="yellow"))
        self.console.print(Text("▔" * (len(text) + 2), style="yellow"))

    def info(self, text: str) -> None:
        self.console.print(Text(f"ℹ {text}", style="cyan"))

    def start(self, text: str) -> None:
        self.console.print(Text(f"★ {text}", style="white"))

    def done(self, text: str) -> None:
        self.console.print(Text(f"✔ {text}", style="green"))

    def warning(self, text: str) -> None:
        self.console.print(Text(f"⚠ {text}", style="yellow"))

    def error(self, text: str) -> None:
        self.console.print(Text(f"✘ {text}", style="red"))

    def components(self, names: Iterable[str]) -> None:
        line = Text()
        for n in names:
            line.append("• ")
            line.append(n, style="green")
            line.append(" ")
        line.append("•")
        self.console.print(line)

    def confirm(self, question: str = "Do you want to continue?") -> bool:
        return Confirm.ask(question, console=self.console)

    # -- event stream -------------------------------------------------------

    def _announce(self, step: str) -> None:
        if step in self._announced or step not in self._numbers:
            return
        self._announced.add(step)
        self.header(f"{self._numbers[step]}/{self._total}: {self._titles[step]}")

    def on_event(self, event: LogEvent) -> None:
        if event.step not in self._numbers:
            # Per-command events stay in the log.
            return
        self._announce(event.step)
        if event.kind is EventKind.START:
            self.start(f"{event.message}...")
        elif event.kind is EventKind.SKIP:
            self.info(event.message)
        elif event.kind is EventKind.SUCCESS:
            self.done(f"{event.message} done.")
        elif event.kind is EventKind.FAILURE:
            if self._fatal.get(event.step, True):
                self.error(event.message)
            else:
                self.warning(f"{event.message} (continuing)")
        else:
            self.info(event.message)

    __call__ = on_event
