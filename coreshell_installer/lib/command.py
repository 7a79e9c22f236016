from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from ..errors import ExecError
from ..logging_utils import EventLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    output: str

    @property
    def first_line(self) -> str:
        for line in self.output.splitlines():
            if line.strip():
                return line.strip()
        return ""


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def sudo(argv: Sequence[str]) -> list[str]:
    return ["sudo", *argv]


class CommandRunner:
    """Run external commands with their output captured into the run log.

    - ``argv`` is always a list; nothing goes through a shell.
    - stdout and stderr are captured together and recorded verbatim; bytes
      that are not UTF-8 are replaced, never fatal.
    - Non-zero exit or failure to spawn raises ExecError. No retries, no timeout.
    """

    def __init__(self, env: Mapping[str, str], events: EventLog, *, dry_run: bool = False) -> None:
        self.env = dict(env)
        self.events = events
        self.dry_run = dry_run

    def run(
        self,
        label: str,
        argv: Sequence[str],
        *,
        cwd: Optional[str] = None,
        input_text: Optional[str] = None,
    ) -> CmdResult:
        argv_list = [str(a) for a in argv]
        logger.info("CMD %s", _fmt_argv(argv_list))

        if self.dry_run:
            self.events.info(label, f"dry-run: {_fmt_argv(argv_list)}")
            return CmdResult(argv=argv_list, returncode=0, output="")

        try:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                encoding="utf-8",
                errors="replace",
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                cwd=cwd,
                env=self.env,
            )
        except OSError as e:
            self.events.info(label, f"could not start {argv_list[0]}", output=str(e))
            raise ExecError(label, argv_list, None, str(e)) from e

        self.events.info(label, f"exit {p.returncode}: {_fmt_argv(argv_list)}", output=p.stdout)

        if p.returncode != 0:
            raise ExecError(label, argv_list, p.returncode)

        return CmdResult(argv=argv_list, returncode=p.returncode, output=p.stdout or "")

    def capture(self, argv: Sequence[str], *, input_text: Optional[str] = None) -> Optional[CmdResult]:
        """Run a read-only query; returns None if the program cannot be started."""

        argv_list = [str(a) for a in argv]
        try:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                encoding="utf-8",
                errors="replace",
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                env=self.env,
            )
        except OSError as e:
            logger.debug("Probe %s unavailable: %s", _fmt_argv(argv_list), e)
            return None
        logger.debug("Probe %s -> %s", _fmt_argv(argv_list), p.returncode)
        return CmdResult(argv=argv_list, returncode=p.returncode, output=p.stdout or "")
