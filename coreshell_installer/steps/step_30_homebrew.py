from __future__ import annotations

from ..context import Toolkit
from ..lib.command import sudo
from ..lib.probe import Platform
from ..lib.remote import run_remote_installer
from .base import BaseStep

LINUXBREW_HOME = "/home/linuxbrew/"


class InstallHomebrewStep(BaseStep):
    step_id = "30_homebrew"
    title = "homebrew setup"
    version_of = "brew"

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.is_installed("brew")

    def run(self, kit: Toolkit) -> None:
        if kit.platform is not Platform.MACOS:
            # The installer expects a writable prefix parent on Linux.
            kit.runner.run("linuxbrew_prefix", sudo(["mkdir", "-p", LINUXBREW_HOME]))
            kit.runner.run("linuxbrew_prefix_mode", sudo(["chmod", "755", LINUXBREW_HOME]))
        run_remote_installer(
            kit.runner,
            "installing_brew",
            kit.config.installer_url("homebrew"),
            download_dir=kit.ctx.path("tmp"),
            interpreter=("/bin/bash",),
        )


class HomebrewAnalyticsStep(BaseStep):
    step_id = "31_homebrew_analytics"
    title = "Disable Homebrew analytics"
    fatal = False

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.brew_analytics_disabled()

    def run(self, kit: Toolkit) -> None:
        kit.runner.run("brew_analytics_disable", ["brew", "analytics", "off"])


class HomebrewUpdateStep(BaseStep):
    step_id = "32_homebrew_update"
    title = "Update Homebrew"
    fatal = False

    def run(self, kit: Toolkit) -> None:
        kit.runner.run("brew_update", ["brew", "update"])
        kit.runner.run("brew_upgrade", ["brew", "upgrade"])
