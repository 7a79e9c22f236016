from __future__ import annotations

from typing import Optional, Sequence


class InstallerError(Exception):
    """Base class for failures a step can report."""


class SourceMissing(InstallerError):
    def __init__(self, source: str) -> None:
        super().__init__(f"Source does not exist: {source}")
        self.source = source


class ExecError(InstallerError):
    def __init__(
        self,
        label: str,
        argv: Sequence[str],
        returncode: Optional[int],
        detail: str = "",
    ) -> None:
        if returncode is None:
            msg = f"Failed to execute '{' '.join(argv)}'"
        else:
            msg = f"Command failed ({returncode}): '{' '.join(argv)}'"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.label = label
        self.argv = list(argv)
        self.returncode = returncode


class FetchError(InstallerError):
    def __init__(self, repo: str, reason: str = "") -> None:
        super().__init__(f"Failed to clone {repo} repository" + (f": {reason}" if reason else ""))
        self.repo = repo


class StepError(InstallerError):
    pass
