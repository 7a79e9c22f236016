from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from .install_config import InstallConfig
from .lib.command import CommandRunner
from .lib.probe import Platform, Prober
from .lib.repos import RepoFetcher
from .logging_utils import EventLog

# Where the Homebrew installer puts brew (Apple silicon, Linux).
BREW_BIN_DIRS = ("/opt/homebrew/bin", "/home/linuxbrew/.linuxbrew/bin")


def new_run_id(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


@dataclass(frozen=True)
class RunContext:
    """Resolved paths and identifiers of one provisioning run.

    Built once from the process environment by ``create``; nothing else reads
    ``os.environ``.
    """

    run_id: str
    home: Path
    user: str
    platform: Platform
    log_path: Path
    events_path: Path
    work_dir: Path
    env: Mapping[str, Path]
    search_path: str
    process_env: Mapping[str, str]
    dry_run: bool = False

    def path(self, key: str) -> Path:
        return self.env[key]

    @classmethod
    def create(
        cls,
        *,
        home: Path,
        environ: Mapping[str, str],
        platform: Platform,
        config: InstallConfig,
        log_dir: Optional[str] = None,
        run_id: Optional[str] = None,
        dry_run: bool = False,
    ) -> "RunContext":
        home = Path(os.path.abspath(home))
        rid = run_id or new_run_id()

        def xdg(name: str, default: Path) -> Path:
            v = environ.get(name)
            return Path(os.path.abspath(v)) if v else default

        tmp = home / ".tmp"
        confdir = home / ".config"
        cachedir = home / ".cache"
        gh = home / config.workspace_dir
        omz = confdir / "omz"
        logs = Path(os.path.abspath(os.path.expanduser(log_dir))) if log_dir else tmp / "InstallShell"

        paths = {
            "tmp": tmp,
            "log_dir": logs,
            "bin": home / "bin",
            "lib": home / "lib",
            "config": confdir,
            "cache": cachedir,
            "zsh_sessions": cachedir / ".zsh_sessions",
            "venv": home / ".venv",
            "xdg_config": xdg("XDG_CONFIG_HOME", confdir),
            "xdg_cache": xdg("XDG_CACHE_HOME", cachedir),
            "xdg_bin": xdg("XDG_BIN_HOME", home / ".local" / "bin"),
            "xdg_data": xdg("XDG_DATA_HOME", home / ".local" / "share"),
            "xdg_state": xdg("XDG_STATE_HOME", home / ".local" / "state"),
            "gh": gh,
            "gh_bin": gh / "bin",
            "gh_lib": gh / "zsh-lib",
            "gh_config": gh / "config",
            "omz": omz,
            "omz_custom": omz / "custom",
        }

        search_dirs = [*BREW_BIN_DIRS, str(paths["xdg_bin"])]
        inherited = environ.get("PATH") or os.defpath
        for d in inherited.split(os.pathsep):
            if d and d not in search_dirs:
                search_dirs.append(d)
        search_path = os.pathsep.join(search_dirs)

        process_env = dict(environ)
        process_env.update(config.environment)
        process_env.update(
            {
                "PATH": search_path,
                "HOME": str(home),
                "TMP": str(tmp),
                "TEMP": str(tmp),
                "ZSH": str(omz),
                "ZSH_CUSTOM": str(paths["omz_custom"]),
                "XDG_CONFIG_HOME": str(paths["xdg_config"]),
                "XDG_CACHE_HOME": str(paths["xdg_cache"]),
                "XDG_BIN_HOME": str(paths["xdg_bin"]),
                "XDG_DATA_HOME": str(paths["xdg_data"]),
                "XDG_STATE_HOME": str(paths["xdg_state"]),
            }
        )

        user = environ.get("USER") or environ.get("LOGNAME") or home.name

        return cls(
            run_id=rid,
            home=home,
            user=user,
            platform=platform,
            log_path=logs / f"install-{rid}.log",
            events_path=logs / f"install-{rid}.events.jsonl",
            work_dir=gh,
            env=MappingProxyType(paths),
            search_path=search_path,
            process_env=MappingProxyType(process_env),
            dry_run=dry_run,
        )


@dataclass(frozen=True)
class Toolkit:
    """Everything a step may use."""

    ctx: RunContext
    config: InstallConfig
    probe: Prober
    runner: CommandRunner
    events: EventLog
    repos: RepoFetcher
    plugins: RepoFetcher

    @property
    def platform(self) -> Platform:
        return self.ctx.platform


def build_toolkit(ctx: RunContext, config: InstallConfig, events: EventLog, *, prober: Optional[Prober] = None) -> Toolkit:
    runner = CommandRunner(ctx.process_env, events, dry_run=ctx.dry_run)
    probe = prober or Prober(
        ctx.search_path,
        runner=runner,
        framework_markers={"omz": ctx.path("omz") / "oh-my-zsh.sh"},
    )
    if probe.runner is None:
        probe.runner = runner
    repos = RepoFetcher(runner, ctx.work_dir, org=config.github_org, host=config.github_host)
    plugins = RepoFetcher(
        runner,
        ctx.path("omz_custom") / "plugins",
        org=config.omz_plugins_org,
        host=config.github_host,
    )
    return Toolkit(
        ctx=ctx,
        config=config,
        probe=probe,
        runner=runner,
        events=events,
        repos=repos,
        plugins=plugins,
    )
