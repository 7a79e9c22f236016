from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Tuple

from ..context import Toolkit
from ..errors import StepError
from ..install_config import ToolSpec
from ..lib.command import sudo
from ..lib.link import link, remove_paths
from ..lib.pkg import apt_install, brew_install, refresh_sudo
from ..lib.probe import Platform
from .base import LINUX, BaseStep

logger = logging.getLogger(__name__)

LANG_VARS = ("LANG", "LANGUAGE", "LC_MESSAGES")
REGIONAL_VARS = (
    "LC_ADDRESS",
    "LC_COLLATE",
    "LC_CTYPE",
    "LC_IDENTIFICATION",
    "LC_MEASUREMENT",
    "LC_MONETARY",
    "LC_NAME",
    "LC_NUMERIC",
    "LC_PAPER",
    "LC_TELEPHONE",
    "LC_TIME",
)


class LocalesStep(BaseStep):
    """English messages, regional formats from a second locale."""

    step_id = "90_locales"
    title = "Locales"
    fatal = False
    platforms = LINUX

    def _wanted(self, kit: Toolkit) -> List[str]:
        out = [kit.config.locale_lang]
        if kit.config.locale_regional not in out:
            out.append(kit.config.locale_regional)
        return out

    def _assignments(self, kit: Toolkit) -> List[str]:
        lang = kit.config.locale_lang
        regional = kit.config.locale_regional
        return [f"{v}={lang}" for v in LANG_VARS] + [f"{v}={regional}" for v in REGIONAL_VARS]

    def is_satisfied(self, kit: Toolkit) -> bool:
        if not all(kit.probe.has_locale(loc) for loc in self._wanted(kit)):
            return False
        try:
            current = (kit.probe.etc_dir / "default" / "locale").read_text(encoding="utf-8")
        except OSError:
            return False
        lines = {ln.strip().replace('"', "") for ln in current.splitlines()}
        return all(a in lines for a in self._assignments(kit))

    def run(self, kit: Toolkit) -> None:
        runner = kit.runner
        refresh_sudo(runner)
        apt_install(runner, ["locales"], label="locales", quiet=True)
        locale_gen = str(kit.probe.etc_dir / "locale.gen")
        for loc in self._wanted(kit):
            if kit.probe.has_locale(loc):
                kit.events.info(self.step_id, f"Locale {loc} already exists")
                continue
            runner.run(f"uncomment_{loc}", sudo(["sed", "-i", f"s/^# *\\({loc}\\)/\\1/", locale_gen]))
            runner.run(f"locale_gen_{loc}", sudo(["locale-gen", loc]))
        runner.run("update_locale", sudo(["update-locale", *self._assignments(kit)]))


class PackageStep(BaseStep):
    """Install one auxiliary tool through the platform's package manager."""

    def __init__(self, tool: ToolSpec) -> None:
        self.tool = tool
        self.step_id = f"91_tool_{tool.name}"
        self.title = f"{tool.name} setup"
        self.fatal = tool.fatal
        self.version_of = tool.name

    def is_satisfied(self, kit: Toolkit) -> bool:
        return kit.probe.is_installed(self.tool.name)

    def run(self, kit: Toolkit) -> None:
        label = f"installing_{self.tool.name}"
        if kit.platform is Platform.MACOS:
            brew_install(kit.runner, [self.tool.brew], label=label)
        elif kit.platform.is_linux:
            refresh_sudo(kit.runner)
            apt_install(kit.runner, [self.tool.apt], label=label)
        else:
            raise StepError(f"Don't know how to install {self.tool.name} on {kit.platform.value}")


LinkPairs = Callable[[Toolkit], List[Tuple[Path, Path]]]


class LinkStep(BaseStep):
    """Keep a fixed set of (source, target) symlinks in place."""

    def __init__(self, step_id: str, title: str, pairs: LinkPairs, *, fatal: bool = False) -> None:
        self.step_id = step_id
        self.title = title
        self.pairs = pairs
        self.fatal = fatal

    def is_satisfied(self, kit: Toolkit) -> bool:
        return all(kit.probe.link_points_to(t, s) for s, t in self.pairs(kit))

    def run(self, kit: Toolkit) -> None:
        for source, target in self.pairs(kit):
            link(source, target, dry_run=kit.ctx.dry_run)


def mc_skins(kit: Toolkit) -> List[Tuple[Path, Path]]:
    return [(kit.ctx.path("gh_config") / "mc" / "skins", kit.ctx.path("xdg_data") / "mc" / "skins")]


def bash_files(kit: Toolkit) -> List[Tuple[Path, Path]]:
    bash = kit.ctx.path("gh_config") / "bash"
    home = kit.ctx.home
    return [(bash / ".bashrc", home / ".bashrc"), (bash / ".bash_profile", home / ".bash_profile")]


class BashFallbackStep(LinkStep):
    """bash stays usable as a fallback shell with the repo's configuration."""

    def __init__(self) -> None:
        super().__init__("95_bash_fallback", "Fallback bash configuration", bash_files)

    def is_satisfied(self, kit: Toolkit) -> bool:
        home = kit.ctx.home
        if (home / ".bash_history").exists() or (home / ".bash_logout").exists():
            return False
        return super().is_satisfied(kit)

    def run(self, kit: Toolkit) -> None:
        home = kit.ctx.home
        remove_paths([home / ".bash_history", home / ".bash_logout"], dry_run=kit.ctx.dry_run)
        super().run(kit)
