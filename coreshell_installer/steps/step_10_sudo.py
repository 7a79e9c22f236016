from __future__ import annotations

import logging
import shlex

from ..context import Toolkit
from ..errors import StepError
from ..lib.pkg import apt_update
from ..lib.probe import Platform
from .base import LINUX, BaseStep

logger = logging.getLogger(__name__)


class InstallSudoStep(BaseStep):
    step_id = "10_sudo"
    title = "sudo setup"
    version_of = "sudo"

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.is_installed("sudo")

    def run(self, kit: Toolkit) -> None:
        if kit.platform is not Platform.DEBIAN_LIKE:
            raise StepError(f"sudo is missing and cannot be installed on {kit.platform.value}")

        kit.events.info(self.step_id, "Enter the root password to install sudo")
        kit.runner.run("installing_sudo", ["su", "-c", "apt-get install -qq sudo"])

        # Grant the invoking user sudo through a validated sudoers.d drop-in.
        user = kit.ctx.user
        entry = kit.ctx.path("tmp") / f"sudoers-{user}"
        if not kit.ctx.dry_run:
            entry.parent.mkdir(parents=True, exist_ok=True)
            entry.write_text(f"{user} ALL=(ALL:ALL) ALL\n", encoding="utf-8")
        script = " && ".join(
            [
                shlex.join(["visudo", "-cf", str(entry)]),
                shlex.join(["install", "-m", "0440", str(entry), f"/etc/sudoers.d/{user}"]),
            ]
        )
        kit.events.info(self.step_id, f"Enter the root password to grant sudo to {user}")
        kit.runner.run("sudoers", ["su", "-c", script])


class SudoAccessStep(BaseStep):
    """Ask for the sudo password once, up front."""

    step_id = "11_sudo_access"
    title = "sudo access"

    def run(self, kit: Toolkit) -> None:
        kit.events.info(self.step_id, "Enter your password for sudo access")
        kit.runner.run("sudo_access", ["sudo", "-v"])


class AptUpdateStep(BaseStep):
    step_id = "12_apt_update"
    title = "Update apt package lists"
    fatal = False
    platforms = LINUX

    def run(self, kit: Toolkit) -> None:
        apt_update(kit.runner, label="apt_update_initial")
