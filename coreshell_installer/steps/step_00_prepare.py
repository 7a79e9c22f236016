from __future__ import annotations

import logging

from ..context import Toolkit
from ..lib.pkg import apt_install
from .base import LINUX, BaseStep

logger = logging.getLogger(__name__)

BASE_DIRS = (
    "tmp",
    "log_dir",
    "bin",
    "config",
    "cache",
    "zsh_sessions",
    "venv",
    "gh",
    "xdg_bin",
    "xdg_data",
    "xdg_state",
)


class PrepareDirectoriesStep(BaseStep):
    step_id = "00_directories"
    title = "Base directories"

    def is_satisfied(self, kit: Toolkit) -> bool:
        return all(kit.ctx.path(k).is_dir() for k in BASE_DIRS)

    def run(self, kit: Toolkit) -> None:
        for key in BASE_DIRS:
            p = kit.ctx.path(key)
            if kit.ctx.dry_run:
                logger.info("Would create %s", p)
                continue
            p.mkdir(parents=True, exist_ok=True)


class TerminfoStep(BaseStep):
    """Kitty sessions over ssh need the kitty terminfo entry on the host."""

    step_id = "05_terminfo"
    title = "Kitty terminfo"
    fatal = False
    platforms = LINUX

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.has_terminfo(kit.config.terminfo_name)

    def run(self, kit: Toolkit) -> None:
        apt_install(kit.runner, [kit.config.terminfo_package], label="kitty-terminfo")
