from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from .command import CommandRunner

logger = logging.getLogger(__name__)


def run_remote_installer(
    runner: CommandRunner,
    label: str,
    url: str,
    *,
    download_dir: Path,
    interpreter: Sequence[str] = ("bash",),
    args: Sequence[str] = (),
    cwd: Optional[str] = None,
) -> None:
    """Download an installer script and execute it non-interactively.

    The script is saved to ``download_dir`` first and then run as a file,
    so the URL and arguments never pass through a shell.
    """

    script = download_dir / f"{label}.sh"
    if not runner.dry_run:
        download_dir.mkdir(parents=True, exist_ok=True)
    runner.run(f"{label}_download", ["curl", "-fsSL", "-o", str(script), url])
    runner.run(label, [*interpreter, str(script), *args], cwd=cwd)
    logger.info("Installer %s finished", url)
