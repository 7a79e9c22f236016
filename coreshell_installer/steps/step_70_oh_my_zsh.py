from __future__ import annotations

from ..context import Toolkit
from ..lib.remote import run_remote_installer
from .base import BaseStep


class InstallOhMyZshStep(BaseStep):
    step_id = "70_oh_my_zsh"
    title = "Oh My Zsh setup"

    def is_satisfied(self, kit: Toolkit) -> bool:
        # omz is a zsh function, answered through its marker file.
        return kit.probe.is_installed("omz")

    def run(self, kit: Toolkit) -> None:
        run_remote_installer(
            kit.runner,
            "installing_omz",
            kit.config.installer_url("oh_my_zsh"),
            download_dir=kit.ctx.path("tmp"),
            interpreter=("sh",),
            args=("--unattended", "--keep-zshrc"),
        )

    def describe(self, kit: Toolkit):
        return f"Oh My Zsh in {kit.ctx.path('omz')}"


class OhMyZshPluginsStep(BaseStep):
    step_id = "71_omz_plugins"
    title = "Oh My Zsh plugins"
    fatal = False

    def is_satisfied(self, kit: Toolkit) -> bool:
        return all(kit.plugins.is_cloned(p) for p in kit.config.omz_plugins)

    def run(self, kit: Toolkit) -> None:
        for plugin in kit.config.omz_plugins:
            kit.events.info(self.step_id, f"Installing {plugin}")
            kit.plugins.fetch(plugin)
