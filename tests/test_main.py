from __future__ import annotations

import io
import json
import os
from types import SimpleNamespace

import pytest
from rich.console import Console

from coreshell_installer import main as main_mod
from coreshell_installer.console import ConsoleReporter
from coreshell_installer.lib.probe import Prober
from coreshell_installer.pipeline import RunStatus
from coreshell_installer.steps import FetchRepositoriesStep, LinkWorkspaceStep, ZshConfigStep

from .test_pipeline import FakeStep


@pytest.fixture
def reporter():
    return ConsoleReporter(Console(file=io.StringIO(), width=120, color_system=None))


def output(reporter) -> str:
    return reporter.console.file.getvalue()


def _run(home, etc_dir, reporter, steps, **kw):
    return main_mod.run(
        home=home,
        environ={"PATH": os.defpath, "USER": "tester"},
        assume_yes=True,
        steps=steps,
        prober=Prober(os.defpath, etc_dir=etc_dir, system=lambda: "Linux"),
        reporter=reporter,
        **kw,
    )


def test_build_steps_order(config):
    steps = main_mod.build_steps(config)
    ids = [s.step_id for s in steps]

    assert len(ids) == len(set(ids))
    assert ids[0] == "00_directories"
    assert ids.index("30_homebrew") < ids.index("40_github_cli") < ids.index("91_tool_mc")
    assert ids.index("50_repositories") < ids.index("51_link_workspace")
    assert ids.index("60_zsh") < ids.index("61_default_shell") < ids.index("62_zsh_config")
    assert ids.index("70_oh_my_zsh") < ids.index("72_zsh_config_relink")
    assert ids[-1] == "95_bash_fallback"
    assert {s.step_id for s in steps if not s.fatal} >= {"71_omz_plugins", "91_tool_htop"}


def test_completed_run(home, etc_dir, reporter):
    result = _run(home, etc_dir, reporter, [FakeStep("a"), FakeStep("b", satisfied=True)])

    assert result.exit_code == 0
    text = output(reporter)
    assert "1/2: Step a" in text
    assert "Installation Completed" in text
    assert "exec zsh" in text

    logs = home / ".tmp" / "InstallShell"
    (log,) = logs.glob("install-*.log")
    assert "Logging initialized" in log.read_text(encoding="utf-8")
    (jsonl,) = logs.glob("install-*.events.jsonl")
    kinds = [(e["step"], e["kind"]) for e in map(json.loads, jsonl.read_text(encoding="utf-8").splitlines())]
    assert kinds == [("a", "start"), ("a", "success"), ("b", "skip")]


def test_aborted_run_names_the_log(home, etc_dir, reporter):
    steps = [FakeStep("a"), FakeStep("b", ok=False), FakeStep("c")]

    result = _run(home, etc_dir, reporter, steps)

    assert result.exit_code == 1
    assert steps[2].calls == 0
    text = output(reporter)
    assert "aborted at step b" in text
    assert "See log:" in text
    assert "Installation Completed" not in text


def test_optional_failure_is_a_warning(home, etc_dir, reporter):
    result = _run(home, etc_dir, reporter, [FakeStep("a", ok=False, fatal=False), FakeStep("b")])

    assert result.exit_code == 0
    assert "continuing" in output(reporter)
    assert "Optional steps failed: a" in output(reporter)
    assert "See log:" in output(reporter)


def test_dry_run_on_a_fresh_home_completes(home, etc_dir, reporter):
    steps = [FetchRepositoriesStep(), LinkWorkspaceStep(), ZshConfigStep()]

    result = _run(home, etc_dir, reporter, steps, dry_run=True)

    assert result.status is RunStatus.COMPLETED
    assert result.ran_steps == ["50_repositories", "51_link_workspace", "62_zsh_config"]
    assert not (home / "GitHub").exists()
    assert not (home / ".zshenv").exists()


def test_declined_run_does_nothing(home, etc_dir, reporter, monkeypatch):
    step = FakeStep("a")
    monkeypatch.setattr(reporter, "confirm", lambda *a, **k: False)

    result = main_mod.run(
        home=home,
        environ={"PATH": os.defpath},
        steps=[step],
        prober=Prober(os.defpath, etc_dir=etc_dir, system=lambda: "Linux"),
        reporter=reporter,
    )

    assert result is None
    assert step.calls == 0


def test_main_exit_code(monkeypatch):
    seen = {}

    def fake_run(**kw):
        seen.update(kw)
        return SimpleNamespace(exit_code=1)

    monkeypatch.setattr(main_mod, "run", fake_run)

    assert main_mod.main(["--yes", "--dry-run", "--start-at", "50_repositories"]) == 1
    assert seen["assume_yes"] and seen["dry_run"]
    assert seen["start_at"] == "50_repositories"


def test_main_declined(monkeypatch):
    monkeypatch.setattr(main_mod, "run", lambda **kw: None)

    assert main_mod.main([]) == 1


def test_main_rejects_unknown_step_id(home, etc_dir, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(home))

    with pytest.raises(SystemExit) as exc:
        main_mod.main(["--yes", "--start-at", "99_nope", "--log-dir", str(home / "logs")])

    assert exc.value.code == 2
    assert "Unknown step id for start_at: 99_nope" in capsys.readouterr().err
