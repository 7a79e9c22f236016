from __future__ import annotations

from typing import FrozenSet, Optional

from ..context import Toolkit
from ..lib.probe import Platform

LINUX = frozenset({Platform.DEBIAN_LIKE, Platform.OTHER_LINUX})
DEBIAN = frozenset({Platform.DEBIAN_LIKE})


class BaseStep:
    step_id = ""
    title = ""
    fatal = True
    platforms: Optional[FrozenSet[Platform]] = None
    # Executable whose ``--version`` is reported after the step.
    version_of: Optional[str] = None

    def is_satisfied(self, kit: Toolkit) -> bool:
        return False

    def run(self, kit: Toolkit) -> None:
        raise NotImplementedError

    def describe(self, kit: Toolkit) -> Optional[str]:
        if not self.version_of:
            return None
        ver = kit.probe.version(self.version_of)
        if ver is None:
            return None
        return f"{self.version_of} version: {ver}"
