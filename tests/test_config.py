from __future__ import annotations

import os
from dataclasses import FrozenInstanceError

import pytest

from coreshell_installer.context import BREW_BIN_DIRS, RunContext
from coreshell_installer.install_config import deep_merge, load_install_config
from coreshell_installer.lib.probe import Platform


def test_catalog_defaults(config):
    assert config.github_org == "barabasz"
    assert config.repos == ["bin", "config", "install", "zsh-lib"]
    assert config.bin_dirs == ["common", "linux", "macos", "test", "windows"]
    assert "zsh" in config.config_apps
    assert config.omz_plugins == ["zsh-autosuggestions", "zsh-syntax-highlighting"]
    assert [t.name for t in config.tools] == ["mc", "bc", "htop"]
    assert not any(t.fatal for t in config.tools)
    assert config.installer_url("homebrew").endswith("/install.sh")
    assert config.environment["NONINTERACTIVE"] == "1"


def test_user_config_is_merged(tmp_path):
    user = tmp_path / "mine.yaml"
    user.write_text(
        "github:\n  org: someone\n"
        "tools:\n  - name: jq\n    fatal: true\n"
        "locales:\n  regional: de_DE.UTF-8\n",
        encoding="utf-8",
    )

    cfg = load_install_config(str(user))

    assert cfg.github_org == "someone"
    assert cfg.github_host == "https://github.com"
    assert [(t.name, t.brew, t.apt, t.fatal) for t in cfg.tools] == [("jq", "jq", "jq", True)]
    assert cfg.locale_lang == "en_US.UTF-8"
    assert cfg.locale_regional == "de_DE.UTF-8"


def test_non_mapping_config_is_rejected(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_install_config(str(bad))


def test_missing_or_non_yaml_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_install_config(str(tmp_path / "missing.yaml"))
    other = tmp_path / "conf.json"
    other.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError):
        load_install_config(str(other))


def test_unknown_installer_key(config):
    with pytest.raises(KeyError):
        config.installer_url("nope")


def test_deep_merge_does_not_mutate_base():
    base = {"a": {"b": 1, "c": [1]}}

    merged = deep_merge(base, {"a": {"c": [2]}})

    assert merged == {"a": {"b": 1, "c": [2]}}
    assert base == {"a": {"b": 1, "c": [1]}}


def _ctx(home, config, **environ):
    environ.setdefault("PATH", "/usr/bin:/bin")
    return RunContext.create(
        home=home,
        environ=environ,
        platform=Platform.DEBIAN_LIKE,
        config=config,
        run_id="20240615-120000",
    )


def test_run_context_paths(home, config):
    ctx = _ctx(home, config, USER="ana")

    assert ctx.user == "ana"
    assert ctx.work_dir == home / "GitHub"
    assert ctx.log_path == home / ".tmp" / "InstallShell" / "install-20240615-120000.log"
    assert ctx.events_path.name == "install-20240615-120000.events.jsonl"
    assert ctx.path("gh_config") == home / "GitHub" / "config"
    assert ctx.path("omz_custom") == home / ".config" / "omz" / "custom"
    assert ctx.path("xdg_bin") == home / ".local" / "bin"
    assert all(os.path.isabs(p) for p in ctx.env.values())


def test_xdg_variables_win(home, config, tmp_path):
    ctx = _ctx(home, config, XDG_DATA_HOME=str(tmp_path / "data"))

    assert ctx.path("xdg_data") == tmp_path / "data"
    assert ctx.process_env["XDG_DATA_HOME"] == str(tmp_path / "data")


def test_search_path_includes_brew_and_local_bin(home, config):
    ctx = _ctx(home, config)
    dirs = ctx.search_path.split(os.pathsep)

    assert dirs[: len(BREW_BIN_DIRS)] == list(BREW_BIN_DIRS)
    assert str(home / ".local" / "bin") in dirs
    assert dirs[-2:] == ["/usr/bin", "/bin"]
    assert ctx.process_env["PATH"] == ctx.search_path
    assert ctx.process_env["ZSH"] == str(home / ".config" / "omz")
    assert ctx.process_env["HOMEBREW_NO_ENV_HINTS"] == "1"


def test_run_context_is_immutable(home, config):
    ctx = _ctx(home, config)

    with pytest.raises(FrozenInstanceError):
        ctx.run_id = "other"
    with pytest.raises(TypeError):
        ctx.env["bin"] = home
