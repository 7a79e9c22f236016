from __future__ import annotations

import logging

from ..context import Toolkit
from ..errors import StepError
from ..lib.command import sudo
from ..lib.pkg import apt_install, apt_update, brew_install, refresh_sudo
from ..lib.probe import Platform
from .base import BaseStep

logger = logging.getLogger(__name__)

KEYRING_DIR = "/etc/apt/keyrings"
KEYRING = f"{KEYRING_DIR}/githubcli-archive-keyring.gpg"
SOURCES_DIR = "/etc/apt/sources.list.d"
SOURCES_LIST = f"{SOURCES_DIR}/github-cli.list"


class InstallGithubCliStep(BaseStep):
    step_id = "40_github_cli"
    title = "github cli setup"
    version_of = "gh"

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.is_installed("gh")

    def run(self, kit: Toolkit) -> None:
        if kit.platform is Platform.MACOS:
            brew_install(kit.runner, ["gh"])
        elif kit.platform is Platform.DEBIAN_LIKE:
            self._install_apt(kit)
        else:
            raise StepError(f"Don't know how to install gh on {kit.platform.value}")

    def _install_apt(self, kit: Toolkit) -> None:
        runner = kit.runner
        tmp = kit.ctx.path("tmp")
        refresh_sudo(runner)

        keyring_tmp = tmp / "githubcli-archive-keyring.gpg"
        runner.run(
            "gh_keyring_download",
            ["curl", "-fsSL", "-o", str(keyring_tmp), kit.config.installer_url("github_cli_keyring")],
        )
        runner.run("gh_keyring_dir", sudo(["install", "-d", "-m", "755", KEYRING_DIR]))
        runner.run("gh_keyring", sudo(["install", "-m", "644", str(keyring_tmp), KEYRING]))

        arch = runner.run("dpkg_arch", ["dpkg", "--print-architecture"]).first_line or "amd64"
        source = (
            f"deb [arch={arch} signed-by={KEYRING}] "
            f"{kit.config.installer_url('github_cli_apt_repo')} stable main\n"
        )
        source_tmp = tmp / "github-cli.list"
        if not kit.ctx.dry_run:
            source_tmp.parent.mkdir(parents=True, exist_ok=True)
            source_tmp.write_text(source, encoding="utf-8")
        runner.run("gh_sources_dir", sudo(["install", "-d", "-m", "755", SOURCES_DIR]))
        runner.run("gh_sources", sudo(["install", "-m", "644", str(source_tmp), SOURCES_LIST]))

        apt_update(runner)
        apt_install(runner, ["gh"])
