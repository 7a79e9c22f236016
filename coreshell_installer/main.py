from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from .console import ConsoleReporter
from .context import RunContext, Toolkit, build_toolkit
from .install_config import InstallConfig, load_install_config
from .lib.probe import Prober
from .logging_utils import EventLog, configure_logging
from .pipeline import PipelineResult, Step, run_pipeline, select_steps
from .steps import (
    AptUpdateStep,
    BashFallbackStep,
    DefaultShellStep,
    FetchRepositoriesStep,
    HomebrewAnalyticsStep,
    HomebrewUpdateStep,
    InstallGitStep,
    InstallGithubCliStep,
    InstallHomebrewStep,
    InstallOhMyPoshStep,
    InstallOhMyZshStep,
    InstallSudoStep,
    InstallZshStep,
    LinkStep,
    LinkWorkspaceStep,
    LocalesStep,
    OhMyZshPluginsStep,
    PackageStep,
    PrepareDirectoriesStep,
    SudoAccessStep,
    TerminfoStep,
    ZshConfigStep,
    mc_skins,
)

logger = logging.getLogger(__name__)

COMPONENTS = ("sudo", "git", "brew", "gh", "zsh", "Oh My Zsh", "oh-my-posh")


def build_steps(config: InstallConfig) -> List[Step]:
    """The catalog, in execution order.

    Do not reorder: sudo before anything run through it, Homebrew before the
    brew-installed tools, repositories before the links into them, zsh before
    its configuration, Oh My Zsh before re-linking over what its installer
    touched.
    """

    steps: List[Step] = [
        PrepareDirectoriesStep(),
        TerminfoStep(),
        InstallSudoStep(),
        SudoAccessStep(),
        AptUpdateStep(),
        InstallGitStep(),
        InstallHomebrewStep(),
        HomebrewAnalyticsStep(),
        HomebrewUpdateStep(),
        InstallGithubCliStep(),
        FetchRepositoriesStep(),
        LinkWorkspaceStep(),
        InstallZshStep(),
        DefaultShellStep(),
        ZshConfigStep(),
        InstallOhMyZshStep(),
        OhMyZshPluginsStep(),
        ZshConfigStep("72_zsh_config_relink", "Re-link zsh configuration"),
        InstallOhMyPoshStep(),
        LocalesStep(),
    ]
    steps.extend(PackageStep(tool) for tool in config.tools)
    steps.append(LinkStep("92_mc_skins", "Midnight Commander skins", mc_skins))
    steps.append(BashFallbackStep())
    return steps


def prepare(
    *,
    home: Path,
    environ: Mapping[str, str],
    config_path: Optional[str] = None,
    log_dir: Optional[str] = None,
    dry_run: bool = False,
    verbose: bool = False,
    prober: Optional[Prober] = None,
    reporter: Optional[ConsoleReporter] = None,
) -> Toolkit:
    """Resolve config, platform and paths once, and wire the components."""

    config = load_install_config(config_path)
    platform = (prober or Prober(environ.get("PATH"))).platform()
    ctx = RunContext.create(
        home=home,
        environ=environ,
        platform=platform,
        config=config,
        log_dir=log_dir,
        dry_run=dry_run,
    )

    actual = configure_logging(log_path=str(ctx.log_path), also_console=verbose)
    if actual != str(ctx.log_path):
        logger.warning("Log directory not writable, using %s", actual)

    events = EventLog(jsonl_path=ctx.events_path)
    if reporter is not None:
        events.listeners.append(reporter)
    kit = build_toolkit(ctx, config, events, prober=prober)
    logger.info("Run %s on %s (user=%s, dry_run=%s)", ctx.run_id, platform.value, ctx.user, dry_run)
    return kit


def run(
    *,
    home: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[str] = None,
    log_dir: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    dry_run: bool = False,
    verbose: bool = False,
    assume_yes: bool = False,
    steps: Optional[List[Step]] = None,
    prober: Optional[Prober] = None,
    reporter: Optional[ConsoleReporter] = None,
) -> Optional[PipelineResult]:
    """Provision this machine. Returns None if the operator declined."""

    reporter = reporter or ConsoleReporter()
    kit = prepare(
        home=home or Path.home(),
        environ=dict(os.environ) if environ is None else environ,
        config_path=config_path,
        log_dir=log_dir,
        dry_run=dry_run,
        verbose=verbose,
        prober=prober,
        reporter=reporter,
    )
    catalog = steps if steps is not None else build_steps(kit.config)
    selected = select_steps(catalog, start_at=start_at, stop_after=stop_after)

    reporter.title("Core Shell Installation Script")
    reporter.console.print("This script will install and configure following components on your system:")
    reporter.components(COMPONENTS)
    reporter.info(f"Log file: {kit.ctx.log_path}")

    if not assume_yes and not reporter.confirm():
        reporter.console.print("Aborted.")
        logger.info("Run declined by operator")
        return None

    reporter.plan(selected)
    try:
        result = run_pipeline(kit=kit, steps=catalog, start_at=start_at, stop_after=stop_after)
    except Exception:
        logger.exception("Installer failed")
        reporter.error("Installer crashed.")
        reporter.info(f"See log: {kit.ctx.log_path}")
        raise

    logger.info(
        "Run %s %s (ran=%s skipped=%s failed=%s)",
        kit.ctx.run_id,
        result.status.value,
        ",".join(result.ran_steps),
        ",".join(result.skipped_steps),
        ",".join(result.failed_steps),
    )

    if result.ok:
        if result.failed_steps:
            reporter.warning(f"Optional steps failed: {', '.join(result.failed_steps)}")
            reporter.info(f"See log: {kit.ctx.log_path}")
        reporter.console.print()
        reporter.title("Installation Completed")
        reporter.console.print("The core shell installation and configuration is now complete.")
        reporter.console.print("1. Restart your terminal or log out and back in for all changes to take effect.")
        reporter.console.print("2. Or run `exec zsh` to switch this session to zsh now.")
    else:
        failed = result.failed_steps[-1] if result.failed_steps else "?"
        reporter.error(f"Installation aborted at step {failed}.")
        reporter.info(f"See log: {kit.ctx.log_path}")
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="coreshell-install")
    p.add_argument("--config", default=None, help="YAML file merged over the built-in catalog")
    p.add_argument("--log-dir", default=None, help="Directory for run logs (default ~/.tmp/InstallShell)")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 50_repositories)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--dry-run", action="store_true", help="Log commands without executing them")
    p.add_argument("--verbose", "-v", action="store_true", help="Mirror the log to the console")
    p.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")

    args = p.parse_args(argv)

    try:
        result = run(
            config_path=args.config,
            log_dir=args.log_dir,
            start_at=args.start_at,
            stop_after=args.stop_after,
            dry_run=bool(args.dry_run),
            verbose=bool(args.verbose),
            assume_yes=bool(args.yes),
        )
    except ValueError as e:
        # Unknown or misordered step ids, or an unusable config file.
        p.error(str(e))
    if result is None:
        return 1
    return result.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
