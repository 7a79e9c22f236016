from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

from ..errors import ExecError, FetchError
from .command import CommandRunner
from .link import PathLike

logger = logging.getLogger(__name__)

DEFAULT_HOST = "https://github.com"


@dataclass(frozen=True)
class RepoRef:
    name: str
    remote_url: str
    local_path: Path


def _remove(path: Path) -> None:
    if os.path.islink(path) or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


class RepoFetcher:
    """Clone repositories of one GitHub namespace into a workspace directory.

    Cloning is always destroy-then-recreate: an existing checkout is removed,
    never pulled, so local modifications there are discarded.
    """

    def __init__(
        self,
        runner: CommandRunner,
        work_dir: PathLike,
        *,
        org: str,
        host: str = DEFAULT_HOST,
    ) -> None:
        self.runner = runner
        self.work_dir = Path(work_dir)
        self.org = org
        self.host = host.rstrip("/")

    def ref(self, name: str) -> RepoRef:
        return RepoRef(
            name=name,
            remote_url=f"{self.host}/{self.org}/{name}.git",
            local_path=self.work_dir / name,
        )

    def is_cloned(self, name: str) -> bool:
        return (self.ref(name).local_path / ".git").exists()

    def fetch(self, name: str) -> RepoRef:
        ref = self.ref(name)

        if not self.runner.dry_run:
            if os.path.lexists(ref.local_path):
                logger.info("Removing existing %s", ref.local_path)
                _remove(ref.local_path)
            self.work_dir.mkdir(parents=True, exist_ok=True)

        try:
            self.runner.run(
                f"git_{name}_clone",
                ["git", "clone", "--progress", ref.remote_url, str(ref.local_path)],
                cwd=str(self.work_dir) if self.work_dir.is_dir() else None,
            )
        except ExecError as e:
            raise FetchError(name, str(e)) from e

        logger.info("Cloned %s into %s", ref.remote_url, ref.local_path)
        return ref

    def fetch_all(self, names: Iterable[str]) -> List[RepoRef]:
        return [self.fetch(n) for n in names]
