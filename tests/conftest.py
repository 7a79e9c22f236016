from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from coreshell_installer.context import RunContext, Toolkit
from coreshell_installer.errors import ExecError
from coreshell_installer.install_config import InstallConfig, load_install_config
from coreshell_installer.lib.command import CmdResult, CommandRunner
from coreshell_installer.lib.probe import Platform, Prober
from coreshell_installer.lib.repos import RepoFetcher
from coreshell_installer.logging_utils import EventLog


class FakeRunner(CommandRunner):
    """Records commands instead of running them; ``git clone`` makes a fresh checkout."""

    def __init__(self, events: EventLog, *, fail_on: Sequence[str] = (), dry_run: bool = False) -> None:
        super().__init__({}, events, dry_run=dry_run)
        self.calls: List[Tuple[str, List[str]]] = []
        self.inputs: dict = {}
        self.queries: List[List[str]] = []
        self.fail_on = set(fail_on)

    def run(self, label, argv, *, cwd=None, input_text=None):
        argv_list = [str(a) for a in argv]
        self.calls.append((label, argv_list))
        if input_text is not None:
            self.inputs[label] = input_text
        if label in self.fail_on:
            raise ExecError(label, argv_list, 1)
        if argv_list[:2] == ["git", "clone"]:
            dest = Path(argv_list[-1])
            (dest / ".git").mkdir(parents=True)
            (dest / "README.md").write_text("fresh\n", encoding="utf-8")
        return CmdResult(argv=argv_list, returncode=0, output="")

    def capture(self, argv, *, input_text=None):
        self.queries.append([str(a) for a in argv])
        return CmdResult(argv=[str(a) for a in argv], returncode=0, output="")

    def argvs(self) -> List[List[str]]:
        return [argv for _, argv in self.calls]


@pytest.fixture
def config() -> InstallConfig:
    return load_install_config()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    h = tmp_path / "home"
    h.mkdir()
    return h


@pytest.fixture
def etc_dir(tmp_path: Path) -> Path:
    d = tmp_path / "etc"
    d.mkdir()
    (d / "debian_version").write_text("12.5\n", encoding="utf-8")
    (d / "os-release").write_text('NAME="Debian GNU/Linux"\nID=debian\n', encoding="utf-8")
    return d


@pytest.fixture
def make_kit(home: Path, etc_dir: Path, config: InstallConfig) -> Callable[..., Toolkit]:
    def _make(
        platform: Platform = Platform.DEBIAN_LIKE,
        *,
        fail_on: Sequence[str] = (),
        login_shell: Optional[str] = None,
        search_path: Optional[str] = None,
    ) -> Toolkit:
        ctx = RunContext.create(
            home=home,
            environ={"PATH": search_path or os.defpath, "USER": "tester"},
            platform=platform,
            config=config,
            run_id="20240615-120000",
        )
        events = EventLog()
        runner = FakeRunner(events, fail_on=fail_on)
        probe = Prober(
            search_path if search_path is not None else ctx.search_path,
            etc_dir=etc_dir,
            system=lambda: "Darwin" if platform is Platform.MACOS else "Linux",
            runner=runner,
            framework_markers={"omz": ctx.path("omz") / "oh-my-zsh.sh"},
            shell_lookup=lambda user: login_shell,
        )
        return Toolkit(
            ctx=ctx,
            config=config,
            probe=probe,
            runner=runner,
            events=events,
            repos=RepoFetcher(runner, ctx.work_dir, org=config.github_org),
            plugins=RepoFetcher(runner, ctx.path("omz_custom") / "plugins", org=config.omz_plugins_org),
        )

    return _make


@pytest.fixture
def workspace(home: Path, config: InstallConfig) -> Path:
    """A cloned-looking ~/GitHub with everything the link steps point at."""

    gh = home / "GitHub"
    for d in config.bin_dirs:
        (gh / "bin" / d).mkdir(parents=True)
    (gh / "install" / "common").mkdir(parents=True)
    (gh / "zsh-lib").mkdir(parents=True)
    for app in config.config_apps:
        (gh / "config" / app).mkdir(parents=True)
    (gh / "config" / "zsh" / ".zshenv").write_text("export ZDOTDIR=~/.config/zsh\n", encoding="utf-8")
    (gh / "config" / "bash" / ".bashrc").write_text("# repo bashrc\n", encoding="utf-8")
    (gh / "config" / "bash" / ".bash_profile").write_text("# repo profile\n", encoding="utf-8")
    (gh / "config" / "mc" / "skins").mkdir()
    return gh
