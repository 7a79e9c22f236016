from __future__ import annotations

from ..context import Toolkit
from ..errors import StepError
from ..lib.pkg import apt_install, apt_update, refresh_sudo
from ..lib.probe import Platform
from .base import BaseStep


class InstallGitStep(BaseStep):
    step_id = "20_git"
    title = "git setup"
    version_of = "git"

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.is_installed("git")

    def run(self, kit: Toolkit) -> None:
        if kit.platform is Platform.MACOS:
            kit.runner.run("installing_git", ["xcode-select", "--install"])
        elif kit.platform.is_linux:
            refresh_sudo(kit.runner)
            apt_update(kit.runner)
            apt_install(kit.runner, ["git"])
        else:
            raise StepError(f"Don't know how to install git on {kit.platform.value}")
