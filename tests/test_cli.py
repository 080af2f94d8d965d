"""Tests for the command line tool."""

import json

from snowplow_tracker import cli
from snowplow_tracker.config import NetworkConfig

from conftest import FakeAdapter


def test_no_command(capsys):
    assert cli.main([]) == 1


def test_send_without_collector(capsys):
    assert cli.main(["send"]) == 1
    assert "Error" in capsys.readouterr().err


def test_send_demo_events(monkeypatch, capsys):
    adapter = FakeAdapter()
    monkeypatch.setattr(NetworkConfig, "build_adapter", lambda self: (adapter, False))

    assert cli.main(["send", "--collector-url", "http://collector.test", "--count", "2"]) == 0

    assert [e["e"] for e in adapter.posted_events] == ["pv", "se", "tr", "ti", "ti"] * 2
    stats = json.loads(capsys.readouterr().out)
    assert stats["sent"] == 10
    assert stats["failed"] == 0


def test_send_reports_failures(monkeypatch, capsys):
    adapter = FakeAdapter(default_status=400)
    monkeypatch.setattr(NetworkConfig, "build_adapter", lambda self: (adapter, False))

    assert cli.main(["send", "--collector-url", "http://collector.test"]) == 2


def test_send_with_config_file(tmp_path, monkeypatch, capsys):
    adapter = FakeAdapter()
    monkeypatch.setattr(NetworkConfig, "build_adapter", lambda self: (adapter, False))
    path = tmp_path / "tracker.yaml"
    path.write_text(
        "tracker:\n  namespace: from-file\n  app_id: cli\n"
        "network:\n  collector_url: http://collector.test\n"
    )

    assert cli.main(["send", "--config", str(path)]) == 0

    assert {e["tna"] for e in adapter.posted_events} == {"from-file"}
