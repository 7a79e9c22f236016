from __future__ import annotations

import logging
from typing import Sequence

from .command import CommandRunner, sudo

logger = logging.getLogger(__name__)


def apt_update(runner: CommandRunner, *, label: str = "apt_update") -> None:
    runner.run(label, sudo(["apt-get", "update"]))


def apt_install(
    runner: CommandRunner,
    packages: Sequence[str],
    *,
    label: str | None = None,
    quiet: bool = False,
) -> None:
    if not packages:
        return
    argv = ["apt-get", "install", "-y"]
    if quiet:
        argv.append("-q")
    runner.run(label or f"installing_{packages[0]}", sudo([*argv, *packages]))


def brew_install(runner: CommandRunner, formulae: Sequence[str], *, label: str | None = None) -> None:
    if not formulae:
        return
    runner.run(label or f"installing_{formulae[0]}", ["brew", "install", *formulae])


def refresh_sudo(runner: CommandRunner) -> bool:
    """Extend the cached sudo credentials without prompting."""

    r = runner.capture(["sudo", "-n", "-v"])
    ok = r is not None and r.returncode == 0
    if not ok:
        logger.debug("sudo credentials not refreshed")
    return ok
