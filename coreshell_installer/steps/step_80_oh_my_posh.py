from __future__ import annotations

from ..context import Toolkit
from ..lib.remote import run_remote_installer
from .base import BaseStep


class InstallOhMyPoshStep(BaseStep):
    step_id = "80_oh_my_posh"
    title = "Oh My Posh setup"
    version_of = "oh-my-posh"

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.is_installed("oh-my-posh")

    def run(self, kit: Toolkit) -> None:
        run_remote_installer(
            kit.runner,
            "installing_oh-my-posh",
            kit.config.installer_url("oh_my_posh"),
            download_dir=kit.ctx.path("tmp"),
            args=("-d", str(kit.ctx.path("xdg_bin"))),
        )
