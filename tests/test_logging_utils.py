from __future__ import annotations

import json
import logging

from coreshell_installer.logging_utils import EventKind, EventLog, configure_logging


def test_events_are_appended_in_order(tmp_path):
    seen = []
    log = EventLog(jsonl_path=tmp_path / "run.events.jsonl", listeners=[seen.append])

    log.start("20_git", "git setup")
    log.info("installing_git", "exit 0: apt-get install -y git", output="Setting up git\n")
    log.failure("20_git", "git setup: boom")

    assert [e.kind for e in log.events] == [EventKind.START, EventKind.INFO, EventKind.FAILURE]
    assert seen == log.events
    assert log.kinds("20_git") == [EventKind.START, EventKind.FAILURE]

    lines = [json.loads(l) for l in (tmp_path / "run.events.jsonl").read_text(encoding="utf-8").splitlines()]
    assert [l["kind"] for l in lines] == ["start", "info", "failure"]
    assert lines[1]["output"] == "Setting up git\n"
    assert "output" not in lines[0]
    assert all(l["ts"] for l in lines)


def test_command_output_reaches_the_log_file(tmp_path):
    path = configure_logging(str(tmp_path / "logs" / "install-1.log"))
    try:
        EventLog().info("brew_update", "exit 0: brew update", output="Already up-to-date.\n")
        for h in logging.getLogger().handlers:
            h.flush()
        text = (tmp_path / "logs" / "install-1.log").read_text(encoding="utf-8")
    finally:
        configure_logging(str(tmp_path / "other.log"))

    assert path == str(tmp_path / "logs" / "install-1.log")
    assert "[brew_update] INFO: exit 0: brew update" in text
    assert "Already up-to-date." in text


def test_reconfiguring_replaces_handlers(tmp_path):
    configure_logging(str(tmp_path / "a.log"))
    configure_logging(str(tmp_path / "b.log"))

    logging.getLogger("coreshell_installer.test").info("only in b")
    for h in logging.getLogger().handlers:
        h.flush()

    assert "only in b" in (tmp_path / "b.log").read_text(encoding="utf-8")
    assert "only in b" not in (tmp_path / "a.log").read_text(encoding="utf-8")
