from __future__ import annotations

import logging
from typing import Optional

from ..context import Toolkit
from ..errors import StepError
from ..lib.command import sudo
from ..lib.link import link, remove_paths, set_aside
from ..lib.pkg import apt_install, refresh_sudo
from ..lib.probe import Platform
from .base import BaseStep

logger = logging.getLogger(__name__)

# Left behind by distro skeletons or earlier shells; zsh reads .zshenv only.
# Startup files may hold user edits and are backed up, session leftovers are not.
STALE_STARTUP_FILES = (".zshrc", ".zprofile", ".zlogin", ".zlogout")
STALE_SESSION_FILES = (".bash_history", ".bash_logout")
STALE_SHELL_FILES = STALE_STARTUP_FILES + STALE_SESSION_FILES


class InstallZshStep(BaseStep):
    step_id = "60_zsh"
    title = "zsh setup"
    version_of = "zsh"

    def is_satisfied(self, kit: Toolkit) -> bool:
        # macOS ships zsh.
        return kit.platform is Platform.MACOS or kit.probe.is_installed("zsh")

    def run(self, kit: Toolkit) -> None:
        if not kit.platform.is_linux:
            raise StepError(f"Don't know how to install zsh on {kit.platform.value}")
        refresh_sudo(kit.runner)
        apt_install(kit.runner, ["zsh"], label="zsh_install")


class DefaultShellStep(BaseStep):
    step_id = "61_default_shell"
    title = "Set zsh as default shell"

    def _zsh(self, kit: Toolkit) -> Optional[str]:
        return kit.probe.which("zsh")

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.is_default_shell(self._zsh(kit), kit.ctx.user)

    def run(self, kit: Toolkit) -> None:
        zsh = self._zsh(kit)
        if zsh is None:
            raise StepError("zsh not found on PATH")
        user = kit.ctx.user

        if kit.platform is Platform.MACOS:
            kit.runner.run("default_shell", sudo(["dscl", ".", "-create", f"/Users/{user}", "UserShell", zsh]))
            return

        shells = kit.probe.etc_dir / "shells"
        try:
            registered = zsh in shells.read_text(encoding="utf-8").split()
        except OSError:
            registered = False
        if not registered:
            kit.runner.run("etc_shells", sudo(["tee", "-a", str(shells)]), input_text=f"{zsh}\n")
        # Run as root, chsh does not prompt.
        kit.runner.run("default_shell", sudo(["chsh", "-s", zsh, user]))


class ZshConfigStep(BaseStep):
    """Remove stale shell files and link ``.zshenv`` from the config repo."""

    step_id = "62_zsh_config"
    title = "Link zsh configuration"

    def __init__(self, step_id: Optional[str] = None, title: Optional[str] = None) -> None:
        if step_id:
            self.step_id = step_id
        if title:
            self.title = title

    def _zshenv(self, kit: Toolkit):
        return kit.ctx.path("gh_config") / "zsh" / ".zshenv", kit.ctx.home / ".zshenv"

    def is_satisfied(self, kit: Toolkit) -> bool:
        home = kit.ctx.home
        if any((home / f).is_file() or (home / f).is_symlink() for f in STALE_SHELL_FILES):
            return False
        source, target = self._zshenv(kit)
        return kit.probe.link_points_to(target, source)

    def run(self, kit: Toolkit) -> None:
        home = kit.ctx.home
        set_aside([home / f for f in STALE_STARTUP_FILES], dry_run=kit.ctx.dry_run)
        remove_paths([home / f for f in STALE_SESSION_FILES], dry_run=kit.ctx.dry_run)
        source, target = self._zshenv(kit)
        link(source, target, dry_run=kit.ctx.dry_run)
