from __future__ import annotations

import logging
import platform as _platform
import pwd
import shutil
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from .command import CommandRunner
from .link import PathLike, points_to

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    MACOS = "macos"
    DEBIAN_LIKE = "debian"
    OTHER_LINUX = "linux"
    UNKNOWN = "unknown"

    @property
    def is_linux(self) -> bool:
        return self in (Platform.DEBIAN_LIKE, Platform.OTHER_LINUX)


def _passwd_shell(user: str) -> Optional[str]:
    return pwd.getpwnam(user).pw_shell or None


class Prober:
    """Yes/no questions about the host.

    Probes never change anything and never raise: when a question cannot be
    answered the answer is False (or None), which at worst causes a redundant
    install.
    """

    def __init__(
        self,
        search_path: Optional[str] = None,
        *,
        etc_dir: PathLike = "/etc",
        system: Callable[[], str] = _platform.system,
        runner: Optional[CommandRunner] = None,
        framework_markers: Optional[Mapping[str, PathLike]] = None,
        shell_lookup: Optional[Callable[[str], Optional[str]]] = None,
    ) -> None:
        self.search_path = search_path
        self.etc_dir = Path(etc_dir)
        self._system = system
        self.runner = runner
        # Shell functions (e.g. ``omz``) are not executables; their presence
        # is answered by a marker file instead.
        self.framework_markers: Dict[str, Path] = {
            k: Path(v) for k, v in (framework_markers or {}).items()
        }
        self._shell_lookup = shell_lookup

    # -- commands -----------------------------------------------------------

    def which(self, command: str) -> Optional[str]:
        try:
            return shutil.which(command, path=self.search_path)
        except OSError:
            return None

    def is_installed(self, command: str) -> bool:
        marker = self.framework_markers.get(command)
        if marker is not None:
            try:
                return marker.is_file()
            except OSError:
                return False
        return self.which(command) is not None

    def _query(self, *argv: str):
        if self.runner is None:
            return None
        return self.runner.capture(list(argv))

    def version(self, command: str, flag: str = "--version") -> Optional[str]:
        path = self.which(command)
        if path is None:
            return None
        r = self._query(path, flag)
        if r is None or r.returncode != 0:
            return None
        return r.first_line or None

    # -- operating system ---------------------------------------------------

    def system(self) -> str:
        try:
            return self._system()
        except Exception:
            return ""

    def is_macos(self) -> bool:
        return self.system() == "Darwin"

    def is_linux(self) -> bool:
        return self.system() == "Linux"

    def is_debian_based(self) -> bool:
        return (self.etc_dir / "debian_version").is_file()

    def os_release(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        try:
            text = (self.etc_dir / "os-release").read_text(encoding="utf-8", errors="ignore")
        except OSError:
            return out
        for line in text.splitlines():
            if "=" not in line or line.lstrip().startswith("#"):
                continue
            k, v = line.split("=", 1)
            out[k.strip()] = v.strip().strip('"').strip("'")
        return out

    def is_debian(self) -> bool:
        return self.os_release().get("ID") == "debian"

    def is_ubuntu(self) -> bool:
        return self.os_release().get("ID") == "ubuntu"

    def platform(self) -> Platform:
        if self.is_macos():
            return Platform.MACOS
        if self.is_linux():
            return Platform.DEBIAN_LIKE if self.is_debian_based() else Platform.OTHER_LINUX
        return Platform.UNKNOWN

    # -- login shell --------------------------------------------------------

    def login_shell(self, user: str) -> Optional[str]:
        try:
            if self._shell_lookup is not None:
                return self._shell_lookup(user)
            if self.is_macos():
                r = self._query("dscl", ".", "-read", f"/Users/{user}", "UserShell")
                if r is None or r.returncode != 0:
                    return None
                parts = r.first_line.split()
                return parts[1] if len(parts) > 1 else None
            return _passwd_shell(user)
        except (KeyError, OSError):
            return None

    def is_default_shell(self, shell_path: Optional[str], user: str) -> bool:
        if not shell_path:
            return False
        return self.login_shell(user) == shell_path

    # -- filesystem ---------------------------------------------------------

    def link_points_to(self, target: PathLike, source: PathLike) -> bool:
        return points_to(target, source)

    # -- misc ---------------------------------------------------------------

    def has_terminfo(self, name: str) -> bool:
        r = self._query("infocmp", name)
        return r is not None and r.returncode == 0

    def has_locale(self, name: str) -> bool:
        r = self._query("locale", "-a")
        if r is None or r.returncode != 0:
            return False
        # locale -a prints normalized names (en_US.utf8).
        want = name.lower().replace("-", "")
        return any(line.strip().lower().replace("-", "") == want for line in r.output.splitlines())

    def brew_analytics_disabled(self) -> bool:
        path = self.which("brew")
        if path is None:
            return False
        r = self._query(path, "analytics", "state")
        return r is not None and r.returncode == 0 and "disabled" in r.output.lower()
