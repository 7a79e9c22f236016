from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Tuple

from ..context import Toolkit
from ..lib.link import link
from .base import BaseStep

logger = logging.getLogger(__name__)


class FetchRepositoriesStep(BaseStep):
    """Fresh clones of every companion repository, every run."""

    step_id = "50_repositories"
    title = "Repositories setup"

    def run(self, kit: Toolkit) -> None:
        refs = kit.repos.fetch_all(kit.config.repos)
        kit.events.info(self.step_id, f"Cloned {len(refs)} repositories into {kit.ctx.work_dir}")


def workspace_links(kit: Toolkit) -> List[Tuple[Path, Path]]:
    """(source, target) pairs tying the workspace into the home directory."""

    env = kit.ctx.env
    pairs: List[Tuple[Path, Path]] = [(env["gh_lib"], env["lib"])]
    for d in kit.config.bin_dirs:
        pairs.append((env["gh_bin"] / d, env["bin"] / d))
    pairs.append((env["gh"] / "install" / "common", env["bin"] / "install"))
    for app in kit.config.config_apps:
        pairs.append((env["gh_config"] / app, env["config"] / app))
    return pairs


class LinkWorkspaceStep(BaseStep):
    step_id = "51_link_workspace"
    title = "Symlink directories and files"

    def is_satisfied(self, kit: Toolkit) -> bool:
        return all(kit.probe.link_points_to(t, s) for s, t in workspace_links(kit))

    def run(self, kit: Toolkit) -> None:
        for source, target in workspace_links(kit):
            outcome = link(source, target, dry_run=kit.ctx.dry_run)
            logger.info("%s -> %s: %s", target, source, outcome.value)
