from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Iterable, Union

from ..errors import SourceMissing

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LinkOutcome(str, Enum):
    UNCHANGED = "unchanged"
    CREATED = "created"
    RELINKED = "relinked"
    BACKED_UP = "backed_up"


def _abs(p: PathLike) -> str:
    # Absolute without resolving symlinks (realpath -s).
    return os.path.abspath(os.path.expanduser(str(p)))


def points_to(target: PathLike, source: PathLike) -> bool:
    """True iff ``target`` is a symlink whose value is exactly ``source``."""

    t = _abs(target)
    try:
        if not os.path.islink(t):
            return False
        return os.readlink(t) == _abs(source)
    except OSError:
        return False


def backup_path(target: PathLike) -> Path:
    """First free backup name: ``target.bak``, then ``target.bak.1``, ..."""

    base = Path(_abs(target))
    candidate = base.with_name(base.name + ".bak")
    n = 1
    while os.path.lexists(candidate):
        candidate = base.with_name(f"{base.name}.bak.{n}")
        n += 1
    return candidate


def link(source: PathLike, target: PathLike, *, dry_run: bool = False) -> LinkOutcome:
    """Make ``target`` a symlink to ``source``.

    Policy for whatever already occupies ``target``:
    - symlink to ``source``: nothing to do;
    - any other symlink (dangling included): replaced;
    - regular file or directory: moved aside to the first free backup name
      (see ``backup_path``); user data is never deleted.

    A dry run only reports the outcome and does not require ``source`` to
    exist yet.
    """

    src = _abs(source)
    dst = _abs(target)

    if not os.path.exists(src) and not dry_run:
        raise SourceMissing(src)

    if points_to(dst, src):
        logger.debug("Link already in place: %s -> %s", dst, src)
        return LinkOutcome.UNCHANGED

    outcome = LinkOutcome.CREATED
    if os.path.islink(dst):
        outcome = LinkOutcome.RELINKED
    elif os.path.exists(dst):
        outcome = LinkOutcome.BACKED_UP

    if dry_run:
        logger.info("Would link %s -> %s (%s)", dst, src, outcome.value)
        return outcome

    Path(dst).parent.mkdir(parents=True, exist_ok=True)

    if outcome is LinkOutcome.RELINKED:
        os.unlink(dst)
    elif outcome is LinkOutcome.BACKED_UP:
        bak = backup_path(dst)
        os.rename(dst, bak)
        logger.info("Backed up %s -> %s", dst, bak)

    os.symlink(src, dst)
    logger.info("Linked %s -> %s (%s)", dst, src, outcome.value)
    return outcome


def remove_paths(paths: Iterable[PathLike], *, dry_run: bool = False) -> list[str]:
    """Remove files and symlinks if present (directories are left alone)."""

    removed: list[str] = []
    for p in paths:
        s = _abs(p)
        if os.path.islink(s) or os.path.isfile(s):
            if not dry_run:
                os.unlink(s)
            removed.append(s)
    if removed:
        logger.info("Removed %s", ", ".join(removed))
    return removed


def set_aside(paths: Iterable[PathLike], *, dry_run: bool = False) -> list[str]:
    """Clear ``paths`` without losing data.

    Symlinks are removed; regular files are moved to their first free backup
    name. Directories are left alone.
    """

    cleared: list[str] = []
    for p in paths:
        s = _abs(p)
        if os.path.islink(s):
            if not dry_run:
                os.unlink(s)
        elif os.path.isfile(s):
            bak = backup_path(s)
            if not dry_run:
                os.rename(s, bak)
            logger.info("Backed up %s -> %s", s, bak)
        else:
            continue
        cleared.append(s)
    return cleared
