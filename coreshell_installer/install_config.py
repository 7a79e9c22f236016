from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CATALOG_PATH = Path(__file__).resolve().parent / "manifests" / "catalog.yaml"


@dataclass(frozen=True)
class ToolSpec:
    name: str
    brew: str
    apt: str
    fatal: bool = False


@dataclass(frozen=True)
class InstallConfig:
    raw: Dict[str, Any]

    def _section(self, key: str) -> Dict[str, Any]:
        return self.raw.get(key) or {}

    @property
    def github_host(self) -> str:
        return str(self._section("github").get("host") or "https://github.com")

    @property
    def github_org(self) -> str:
        return str(self._section("github").get("org") or "barabasz")

    @property
    def workspace_dir(self) -> str:
        return str(self._section("workspace").get("dir") or "GitHub")

    @property
    def repos(self) -> List[str]:
        return [str(r) for r in self._section("workspace").get("repos") or []]

    @property
    def bin_dirs(self) -> List[str]:
        return [str(d) for d in self._section("workspace").get("bin_dirs") or []]

    @property
    def config_apps(self) -> List[str]:
        return [str(a) for a in self._section("workspace").get("config_apps") or []]

    @property
    def omz_plugins_org(self) -> str:
        return str(self._section("oh_my_zsh").get("plugins_org") or "zsh-users")

    @property
    def omz_plugins(self) -> List[str]:
        return [str(p) for p in self._section("oh_my_zsh").get("plugins") or []]

    def installer_url(self, key: str) -> str:
        url = self._section("installers").get(key)
        if not url:
            raise KeyError(f"installers.{key} missing from catalog")
        return str(url)

    @property
    def tools(self) -> List[ToolSpec]:
        out: List[ToolSpec] = []
        for t in self.raw.get("tools") or []:
            if not isinstance(t, dict) or not t.get("name"):
                raise ValueError(f"tools entries need a name: {t!r}")
            name = str(t["name"])
            out.append(
                ToolSpec(
                    name=name,
                    brew=str(t.get("brew") or name),
                    apt=str(t.get("apt") or name),
                    fatal=bool(t.get("fatal", False)),
                )
            )
        return out

    @property
    def locale_lang(self) -> str:
        return str(self._section("locales").get("lang") or "en_US.UTF-8")

    @property
    def locale_regional(self) -> str:
        return str(self._section("locales").get("regional") or self.locale_lang)

    @property
    def terminfo_name(self) -> str:
        return str(self._section("terminfo").get("name") or "xterm-kitty")

    @property
    def terminfo_package(self) -> str:
        return str(self._section("terminfo").get("apt") or "kitty-terminfo")

    @property
    def environment(self) -> Dict[str, str]:
        return {str(k): str(v) for k, v in self._section("environment").items()}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into a copy of ``base``; only mappings are merged."""

    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = copy.deepcopy(v)
    return out


def _load_yaml(path: Path) -> Dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping/object")
    return raw


def load_install_config(path: Optional[str] = None) -> InstallConfig:
    raw = _load_yaml(CATALOG_PATH)
    if path:
        p = Path(path).expanduser()
        if not p.exists():
            raise FileNotFoundError(path)
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("install config must be YAML")
        raw = deep_merge(raw, _load_yaml(p))
    return InstallConfig(raw=raw)
